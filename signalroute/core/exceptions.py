class GeodataUnavailable(Exception):
    """The Overpass service could not provide usable traffic-signal data.

    Raised for network errors, timeouts after retries, non-2xx responses and
    payloads that are not JSON or carry no `elements` list.
    """

    def __init__(self, reason: str, detail: str = ""):
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason}: {detail}" if detail else reason)
