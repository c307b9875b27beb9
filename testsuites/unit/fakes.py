"""
In-memory stand-ins for Playwright's async Page and ElementHandle.

Only the calls the harness makes are implemented.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple


class FakeElement:
    def __init__(
        self,
        html: str = "<div></div>",
        text: str = "",
        value: str = "",
        visible: bool = True,
        enabled: bool = True,
    ):
        self.html = html
        self.text = text
        self.value = value
        self.visible = visible
        self.enabled = enabled

        self.clicks = 0
        self.filled: List[str] = []
        self.hovers = 0
        self.scrolls = 0
        # Raised by click(); a list raises its items one call at a time
        self.click_errors: List[Exception] = []
        self.always_fail_with: Optional[Exception] = None

    async def click(self) -> None:
        self.clicks += 1
        if self.always_fail_with is not None:
            raise self.always_fail_with
        if self.click_errors:
            raise self.click_errors.pop(0)

    async def fill(self, value: str) -> None:
        self.filled.append(value)
        self.value = value

    async def hover(self) -> None:
        self.hovers += 1

    async def inner_text(self) -> str:
        return self.text

    async def input_value(self) -> str:
        return self.value

    async def evaluate(self, script: str, arg: Any = None) -> str:
        return self.html

    async def is_enabled(self) -> bool:
        return self.enabled

    async def is_visible(self) -> bool:
        return self.visible

    async def scroll_into_view_if_needed(self) -> None:
        self.scrolls += 1


class FakePage:
    def __init__(self, url: str = "about:blank", title: str = ""):
        self.url = url
        self.page_title = title
        self.elements: Dict[str, FakeElement] = {}
        self.visited: List[str] = []
        self.viewport: Optional[Dict[str, int]] = None
        self.scripts: List[Tuple[str, Any]] = []
        self.title_calls = 0
        self.queries: List[str] = []

    def add(self, selector: str, element: Optional[FakeElement] = None) -> FakeElement:
        element = element or FakeElement(html=f'<div data-selector="{selector}"></div>')
        self.elements[selector] = element
        return element

    async def title(self) -> str:
        self.title_calls += 1
        return self.page_title

    async def query_selector(self, selector: str) -> Optional[FakeElement]:
        self.queries.append(selector)
        return self.elements.get(selector)

    async def goto(self, url: str) -> None:
        self.visited.append(url)
        self.url = url

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        self.scripts.append((script, arg))
        return arg

    async def set_viewport_size(self, size: Dict[str, int]) -> None:
        self.viewport = size
