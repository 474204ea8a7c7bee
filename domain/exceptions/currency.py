class CurrencyException(Exception):
    pass


class InvalidInputError(CurrencyException):
    """Malformed currency code, same-currency pair or bad amount."""


class UnknownCurrencyError(CurrencyException):
    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Currency {code} is not supported")


class NoProviderSupportError(CurrencyException):
    def __init__(self, base: str, target: str):
        self.base = base
        self.target = target
        super().__init__(f"No providers support currency pair {base} -> {target}")


class ProviderError(CurrencyException):
    """A single provider failed. `transient` failures are worth retrying."""

    def __init__(self, message: str, provider_name: str | None = None, transient: bool = False):
        self.provider_name = provider_name
        self.transient = transient
        super().__init__(message)


class UnsupportedPairError(ProviderError):
    def __init__(self, base: str, target: str, provider_name: str | None = None):
        self.base = base
        self.target = target
        super().__init__(
            f"{provider_name or 'Provider'} cannot serve {base} -> {target}",
            provider_name=provider_name,
            transient=False,
        )


class AllProvidersFailedError(CurrencyException):
    def __init__(self, base: str, target: str, failures: dict[str, str]):
        self.base = base
        self.target = target
        self.failures = dict(failures)
        details = "; ".join(f"{name}: {reason}" for name, reason in self.failures.items())
        super().__init__(f"All providers failed for {base} -> {target}. Failures: {details}")


class RefreshError(CurrencyException):
    pass
