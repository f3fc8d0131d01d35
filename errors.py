"""Error types raised at the store, storage and email seams."""


class MultimediaRequestError(Exception):
    pass


class ValidationError(MultimediaRequestError):
    """Input failed the form schema. `errors` maps field name -> message."""

    def __init__(self, errors):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))


class NotFoundError(MultimediaRequestError):
    pass


class TransportError(MultimediaRequestError):
    """A store, storage or email call failed. `payload` holds the error body if any."""

    def __init__(self, message, payload=None):
        self.payload = payload
        super().__init__(message)


class IntegrityGap(MultimediaRequestError):
    """A request whose employee could not be resolved."""
