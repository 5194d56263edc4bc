# jobhub/gql/context.py

from jobhub.db.gateway import DataGateway

_default_gateway = None


def default_gateway() -> DataGateway:
    global _default_gateway
    if _default_gateway is None:
        _default_gateway = DataGateway()
    return _default_gateway


def get_gateway(info) -> DataGateway:
    """ The gateway for this request: the one placed on the context, else the shared one. """
    gateway = info.context.get("gateway")
    if gateway is None:
        gateway = default_gateway()
        info.context["gateway"] = gateway
    return gateway


def build_context(request, background=None) -> dict:
    return {"request": request, "background": background, "gateway": default_gateway()}
