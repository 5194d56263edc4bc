# static data

# Skills a business can post a job for; the job title carries the chosen skill.
DEFAULT_SKILLS = [
    "Carpenter",
    "Plumber",
    "Cook",
    "Electrician",
    "Cleaner",
    "Mason",
    "Painter",
    "Welder",
    "Driver",
    "Security Guard",
]

JOB_TYPES = ["full-time", "part-time", "contract", "temporary", "seasonal"]

WORKER_STATUSES = ["Available", "Busy", "Unavailable"]

REQUEST_PRIORITIES = ["Low", "Normal", "High", "Urgent"]

# demo rows, loaded when SEED_DEMO_DATA is set
businesses_data = [
    {"name": "BuildRight Constructions", "email": "ops@buildright.example", "industry": "Construction"},
    {"name": "FreshBite Kitchens", "email": "hr@freshbite.example", "industry": "Hospitality"},
]

workers_data = [
    {"name": "Ravi Kumar", "email": "ravi@workers.example", "phone": "9000000001",
     "skill": "Plumber", "experience": 6, "rating": 4.5, "status": "Available"},
    {"name": "Anita Das", "email": "anita@workers.example", "phone": "9000000002",
     "skill": "Plumber", "experience": 3, "rating": 4.1, "status": "Available"},
    {"name": "Sunil Rao", "email": "sunil@workers.example", "phone": "9000000003",
     "skill": "Electrician", "experience": 8, "rating": 4.8, "status": "Busy"},
    {"name": "Meena Iyer", "email": "meena@workers.example", "phone": "9000000004",
     "skill": "Cook", "experience": 5, "rating": 4.3, "status": "Available"},
]
