"""Client facade handed to the verification pipeline.

Composes one CompilerPool with zero or one ExtensionMiddleware. Built once
per language at startup and passed explicitly into pipeline entry points.
"""

from ..compilers.pool import CompilerPool
from .extensions import ExtensionMiddleware


class VerifierClient:
    """Everything the pipeline needs for one language.

    Example:
        >>> client = VerifierClient(pool).with_middleware(HttpLookupMiddleware("http://lookup"))
        >>> result = await verify_multi_part(client, request)
    """

    def __init__(self, compilers: CompilerPool, middleware: ExtensionMiddleware | None = None) -> None:
        self.compilers = compilers
        self.middleware = middleware

    @property
    def language(self) -> str:
        return self.compilers.language

    def with_middleware(self, middleware: ExtensionMiddleware) -> "VerifierClient":
        """Return a client that consults middleware when local verification fails."""
        return VerifierClient(self.compilers, middleware)
