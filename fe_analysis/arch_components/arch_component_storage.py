"""Assignment of variables to architecture components."""

import typing as tp


class ArchComponentStorage():
    """
    Maps variables to the architecture component they belong to.

    Variables without a component have the empty label, which is never the
    same component as any other label.
    """

    def __init__(self) -> None:
        self.__components: tp.Dict[str, str] = {}

    def set_component(self, variable: str, component: str) -> None:
        """Assign a component, empty labels are ignored."""
        if component:
            self.__components[variable] = component

    def get_component(self, variable: str) -> str:
        return self.__components.get(variable, "")

    def is_same_component(self, variable1: str, variable2: str) -> bool:
        """
        Check whether two variables belong to the same component.

        Returns: ``True`` if both variables have the same, non-empty
                 component label
        """
        component1 = self.get_component(variable1)
        component2 = self.get_component(variable2)
        if not component1 or not component2:
            return False
        return component1 == component2

    def __iter__(self) -> tp.Iterator[tp.Tuple[str, str]]:
        return iter(self.__components.items())

    def __len__(self) -> int:
        return len(self.__components)
