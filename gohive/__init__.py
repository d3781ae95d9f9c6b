"""
GoHive backend package.

This package contains:
- settings: configuration read from the environment / .env
- logging_config: shared logging setup
- errors: error taxonomy and the JSON error envelope
- jwt_auth: session token gate shared by all services
- routing / upstream: gateway route table and proxy forwarding
- services: token store, backend adapter, user/post/mentor logic
- routes: FastAPI app factories for the gateway and each service
"""

__version__ = "0.1.0"
