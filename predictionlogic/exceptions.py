class PLError(Exception): ...


class IngestError(PLError): ...


class OptimizationError(PLError): ...


def require(condition: bool, message: str, exc: type[PLError] = PLError):
    """Raise the given exception if condition is False."""
    if not condition:
        raise exc(message)
