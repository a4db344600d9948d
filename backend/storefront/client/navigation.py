from typing import List


class HistoryNavigator:
    """
    In-memory navigation history.

    The cart only needs to know the current location and to move to another
    one (the login page, or back to where an add-to-cart started).
    """

    def __init__(self, current_url: str = "/"):
        self.history: List[str] = [current_url]

    @property
    def current_url(self) -> str:
        return self.history[-1]

    def push(self, url: str) -> None:
        self.history.append(url)
