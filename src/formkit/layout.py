"""Layout containers. They hold no state of their own, only child nodes."""

from typing import Any, ClassVar, Dict, List, Optional, Union

from pydantic import Field as PydanticField

from .context import RenderContext
from .fields import Component
from .utils import label_from_name


class Section(Component):
    kind: ClassVar[str] = "section"
    vue_component: ClassVar[str] = "Section"
    flutter_widget: ClassVar[str] = "LaraviltSection"

    heading: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    components: List[Component] = PydanticField(default_factory=list, alias="schema")
    collapsible: bool = False
    collapsed: bool = False
    aside: bool = False
    columns: Union[int, Dict[str, int]] = 1

    def child_nodes(self) -> List[Component]:
        return list(self.components)

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        heading = self.heading
        if heading is None and self.id:
            heading = label_from_name(self.id)
        return {
            "heading": heading,
            "description": self.description,
            "icon": self.icon,
            "collapsible": self.collapsible,
            "collapsed": self.collapsed,
            "aside": self.aside,
            "columns": self.columns,
            "schema": [ctx.render(c) for c in self.components],
        }


class Grid(Component):
    kind: ClassVar[str] = "grid"
    vue_component: ClassVar[str] = "Grid"
    flutter_widget: ClassVar[str] = "LaraviltGrid"

    columns: Union[int, Dict[str, int]] = 2
    components: List[Component] = PydanticField(default_factory=list, alias="schema")

    def child_nodes(self) -> List[Component]:
        return list(self.components)

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "columns": self.columns,
            "schema": [ctx.render(c) for c in self.components],
        }


class Tab(Component):
    kind: ClassVar[str] = "tab"
    vue_component: ClassVar[str] = "Tab"
    flutter_widget: ClassVar[str] = "LaraviltTab"

    label: str
    icon: Optional[str] = None
    badge: Optional[Union[str, int]] = None
    components: List[Component] = PydanticField(default_factory=list, alias="schema")

    def child_nodes(self) -> List[Component]:
        return list(self.components)

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "label": self.label,
            "icon": self.icon,
            "badge": self.badge,
            "schema": [ctx.render(c) for c in self.components],
        }


class Tabs(Component):
    kind: ClassVar[str] = "tabs"
    vue_component: ClassVar[str] = "Tabs"
    flutter_widget: ClassVar[str] = "LaraviltTabs"

    tabs: List[Tab] = PydanticField(default_factory=list)
    active_tab: int = 1
    contained: bool = True

    def child_nodes(self) -> List[Component]:
        return list(self.tabs)

    def kind_props(self, ctx: RenderContext) -> Dict[str, Any]:
        return {
            "activeTab": self.active_tab,
            "contained": self.contained,
            "schema": [ctx.render(tab) for tab in self.tabs],
        }
