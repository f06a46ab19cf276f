"""
Exceptions raised by the fetcher. Network failures propagate to the caller.
"""


class FetchError(Exception):
    def __init__(self, url: str, message: str):
        super().__init__(f"{message} for {url}")
        self.url = url
        self.message = message


class FetchTimeout(FetchError):
    pass


class FetchConnectionError(FetchError):
    pass


class TooManyRefetches(FetchError):
    def __init__(self, url: str, limit: int):
        super().__init__(url, f"Redirect re-fetch limit of {limit} exceeded")
        self.limit = limit
