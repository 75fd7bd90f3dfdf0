"""In-memory stand-ins for Playwright pages and locators used by unit tests."""

from typing import Dict, List, Optional, Union

from playwright.async_api import TimeoutError as PlaywrightTimeoutError


class FakeRoot:
    """
    Minimal element container with Page.locator() semantics.

    A selector maps to one FakeElement, or to a list of them when it
    matches several (result cards).
    """

    def __init__(self, elements: Optional[Dict[str, Union["FakeElement", list]]] = None):
        self.elements = elements or {}
        self.waits: List[tuple] = []

    def locator(self, selector: str) -> "FakeLocator":
        return FakeLocator(self, selector)

    def matches(self, selector: str) -> List["FakeElement"]:
        found = self.elements.get(selector)
        if found is None:
            return []
        return list(found) if isinstance(found, list) else [found]


class FakeElement(FakeRoot):
    def __init__(
        self,
        text: Optional[str] = "",
        attributes: Optional[Dict[str, str]] = None,
        visible: bool = True,
        children: Optional[Dict[str, Union["FakeElement", list]]] = None,
    ):
        super().__init__(children)
        self.text = text
        self.attributes = attributes or {}
        self.visible = visible
        self.clicks = 0
        self.value = ""
        self.selected: Optional[str] = None


class FakeLocator:
    def __init__(self, root: FakeRoot, selector: str, index: int = 0):
        self.root = root
        self.selector = selector
        self.index = index

    @property
    def element(self) -> Optional[FakeElement]:
        matches = self.root.matches(self.selector)
        return matches[self.index] if self.index < len(matches) else None

    @property
    def first(self) -> "FakeLocator":
        return self.nth(0)

    def nth(self, index: int) -> "FakeLocator":
        return FakeLocator(self.root, self.selector, index)

    def locator(self, selector: str) -> "FakeLocator":
        element = self.element
        return FakeLocator(element if element is not None else FakeRoot(), selector)

    async def count(self) -> int:
        return len(self.root.matches(self.selector))

    async def wait_for(self, state: str = "visible", timeout: int = 0) -> None:
        self.root.waits.append((self.selector, timeout))
        element = self.element
        if element is None or (state == "visible" and not element.visible):
            raise PlaywrightTimeoutError(
                f"Timeout {timeout}ms exceeded.\nwaiting for locator('{self.selector}')"
            )

    async def text_content(self) -> Optional[str]:
        return self.element.text

    async def get_attribute(self, name: str) -> Optional[str]:
        return self.element.attributes.get(name)

    async def click(self, **kwargs) -> None:
        self.element.clicks += 1

    async def clear(self) -> None:
        self.element.value = ""

    async def fill(self, value: str, **kwargs) -> None:
        self.element.value = value

    async def select_option(self, value: str, **kwargs) -> List[str]:
        self.element.selected = value
        return [value]


class FakeKeyboard:
    def __init__(self):
        self.presses: List[str] = []

    async def press(self, key: str) -> None:
        self.presses.append(key)


class FakePage(FakeRoot):
    def __init__(self, elements: Optional[Dict[str, Union[FakeElement, list]]] = None):
        super().__init__(elements)
        self.handlers: Dict[str, list] = {}
        self.timeouts: List[float] = []
        self.load_states: List[str] = []
        self.keyboard = FakeKeyboard()

    def on(self, event: str, handler) -> None:
        self.handlers.setdefault(event, []).append(handler)

    async def wait_for_timeout(self, timeout: float) -> None:
        self.timeouts.append(timeout)

    async def wait_for_load_state(self, state: str = "load", **kwargs) -> None:
        self.load_states.append(state)


class FakeClock:
    """Virtual time for the executors: pauses advance the clock instead of sleeping."""

    def __init__(self):
        self.now = 0.0
        self.pauses: List[float] = []

    def __call__(self) -> float:
        return self.now

    async def pause(self, seconds: float) -> None:
        self.pauses.append(seconds)
        self.now += seconds
