import re
from pathlib import Path
from typing import Union

from bombe.errors import InvalidSymbolError, ResourceError
from bombe.plugboard import ALPHABET


REGEX_HAS_MORE_THAN_LETTERS = rf"[^{ALPHABET}]"
COMPILED_REGEX_HAS_MORE_THAN_LETTERS = re.compile(REGEX_HAS_MORE_THAN_LETTERS)

def read_ciphertext(path: Union[str, Path]) -> str:
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ResourceError(f"cannot read ciphertext {path}: {exc}") from exc
    ciphertext = content.strip()

    bad = COMPILED_REGEX_HAS_MORE_THAN_LETTERS.search(ciphertext)
    if bad:
        raise InvalidSymbolError(f"input is not {ALPHABET[0]}-{ALPHABET[-1]} only: {bad.group()!r} at offset {bad.start()}")

    return ciphertext
