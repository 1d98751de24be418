import builtins
import time
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from lbasic.types import Value, to_string


class ConsoleIO:
    """Collaborators the interpreter uses for its side effects.

    Output goes to stdout and is also kept as a transcript; `echo=False`
    keeps the transcript only. Input comes from `inputs` when given,
    otherwise from `builtins.input`.
    """
    def __init__(self, echo: bool = True, inputs: Optional[Iterable[str]] = None,
                 clock: Callable[[], float] = time.time,
                 sleep: Callable[[float], None] = time.sleep,
                 base_dir: Optional[str] = None):
        self.echo = echo
        self.inputs: Optional[List[str]] = list(inputs) if inputs is not None else None
        self.clock = clock
        self.sleep = sleep
        self.base_dir = Path(base_dir) if base_dir is not None else Path('.')
        self.transcript: List[str] = []

    @property
    def text(self) -> str:
        return ''.join(self.transcript)

    def reset(self):
        self.transcript = []

    def write(self, text: str):
        self.transcript.append(text)
        if self.echo:
            print(text, end='', flush=True)

    def request_input(self, prompt: str) -> str:
        if self.inputs is not None:
            if prompt and self.echo:
                print(prompt, end='', flush=True)
            return self.inputs.pop(0) if self.inputs else ''
        try:
            return builtins.input(prompt)
        except EOFError:
            return ''

    def now_millis(self) -> int:
        return int(self.clock() * 1000)

    def delay(self, seconds: float):
        if seconds > 0:
            self.sleep(seconds)

    def load_module(self, path: str) -> Optional[str]:
        """Return the source text of a BASIC module, or None if it cannot be read."""
        file_path = Path(path)
        if not file_path.is_absolute():
            file_path = self.base_dir / file_path
        if not file_path.exists():
            return None
        with open(file_path, 'r', encoding='utf-8') as f:
            return f.read()

    def export(self, name: str, value: Value):
        self.write(f"exp:{name}:{to_string(value)}\n")
