from .auth_middleware import BearerAuthenticator, decode_credential, encode_credential, extract_bearer

__all__ = ["BearerAuthenticator", "decode_credential", "encode_credential", "extract_bearer"]
