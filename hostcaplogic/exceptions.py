class HCError(Exception): ...


class SeriesError(HCError): ...


class AlignmentError(HCError): ...


class IngestError(HCError): ...


class ConfigError(HCError): ...


def require(condition: bool, message: str, exc: type[HCError] = HCError):
    """Raise the given exception if condition is False."""
    if not condition:
        raise exc(message)
