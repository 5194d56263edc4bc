# create_admin.py
import logging
from getpass import getpass

from jobhub.db.database import Session, prepare_database
from jobhub.db.models import User
from jobhub.utils import hash_password, is_password_strong, validate_user_email

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger(__name__)


def create_admin(email: str, password: str, phone: str = None) -> User:
    """Validates the inputs and stores a new admin login. Raises ValueError on bad input."""
    normalized_email = validate_user_email(email)
    is_password_strong(password, email=normalized_email)
    with Session() as session:
        existing_user = session.query(User).filter(User.email == normalized_email).first()
        if existing_user:
            raise ValueError(
                f"User with email '{normalized_email}' already exists (ID: {existing_user.id}, Role: {existing_user.role})."
            )
        new_admin = User(email=normalized_email, phone=phone, password_hash=hash_password(password), role="admin")
        try:
            session.add(new_admin)
            session.commit()
            session.refresh(new_admin)
        except Exception:
            session.rollback()
            raise
    return new_admin


def main():
    log.info("--- Admin User Creation Script ---")
    try:
        email = input("Enter email for the new admin: ").strip()
        if not email:
            log.error("Email cannot be empty.")
            return
        phone = input("Enter phone for the new admin (optional): ").strip() or None

        while True:
            password = getpass("Enter a strong temporary password for the new admin: ")
            password_confirm = getpass("Confirm the password: ")
            if password != password_confirm:
                log.warning("Passwords do not match. Please try again.")
            elif not password:
                log.warning("Password cannot be empty. Please try again.")
            else:
                break

        try:
            new_admin = create_admin(email, password, phone)
        except ValueError as ve:
            log.error(f"Admin not created: {ve}")
            return
        log.info("--- Successfully created new admin user ---")
        log.info(f"  ID:    {new_admin.id}")
        log.info(f"  Email: {new_admin.email}")
        log.warning("IMPORTANT: log in and replace this temporary password.")
    except KeyboardInterrupt:
        log.info("\nAdmin creation process cancelled by user.")
    except Exception as e:
        log.error(f"An unexpected error occurred during the admin creation process: {e}", exc_info=True)


if __name__ == "__main__":
    log.info("Preparing database (ensuring tables exist)...")
    prepare_database(seed=False)
    main()
