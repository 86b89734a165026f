from strato.infra.http import Auth, BearerAuth, HttpClient, HttpError, describe_request

__all__ = ["Auth", "BearerAuth", "HttpClient", "HttpError", "describe_request"]
