from typing import List, Optional

from lbasic.environment import Environment


class FunctionSetRegistry:
    """Named lookup of runtime environments.

    Child engines find the environment of their parent here, so both see
    the same variables and arrays. Registration order matters: when two
    environments share a name, `lookup` returns the first one registered.
    """
    def __init__(self):
        self.sets: List[Environment] = []

    def register(self, env: Environment):
        self.sets.append(env)

    def lookup(self, name: str) -> Optional[Environment]:
        for env in self.sets:
            if env.name == name:
                return env
        return None

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None

    def __len__(self) -> int:
        return len(self.sets)
