import configparser
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from bombe.errors import ConfigurationError
from bombe.machine import MachineConfig
from bombe.plugboard import ALPHABET
from bombe.search import SearchSettings


DEFAULT_CONFIG_FILE = "config.ini"
CONFIG_ENV_VAR = "BOMBE_CONFIG"

DEFAULTS = {
    "INPUT FILES": {
        "trigrams_file_path": "english_trigrams.txt",
    },
    "MACHINE": {
        "rotors": "Beta II IV III",
        "rings": "1 1 1 16",
        "positions": "A A B Q",
        "reflector": "C-thin",
    },
    "SEARCH": {
        "rotor_pool": "I II V VI Beta Gamma",
        "slots": "0 1",
        "first_positions": ALPHABET,
        "second_positions": ALPHABET,
        "workers": "1",
    },
    "OUTPUT": {
        "save_trace": "no",
        "trace_dir": ".",
    },
}


@dataclass(frozen=True)
class Settings:
    trigrams_file_path: str
    search: SearchSettings
    save_trace: bool
    trace_dir: str


def read_config(path: Optional[Union[str, Path]] = None) -> configparser.ConfigParser:
    """Built-in defaults, overridden by config.ini (or $BOMBE_CONFIG) when it exists."""
    config = configparser.ConfigParser()
    config.read_dict(DEFAULTS)
    path = path or os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_FILE)
    try:
        config.read(path, encoding="utf-8")
    except configparser.Error as exc:
        raise ConfigurationError(f"cannot parse {path}: {exc}") from exc
    return config


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    config = read_config(path)
    machine = config["MACHINE"]
    search = config["SEARCH"]

    try:
        slots = tuple(int(s) for s in search["slots"].split())
        workers = search.getint("workers")
        save_trace = config["OUTPUT"].getboolean("save_trace")
    except ValueError as exc:
        raise ConfigurationError(f"invalid setting: {exc}") from exc

    base = MachineConfig.from_key_sheet(
        rotors=machine["rotors"],
        rings=machine["rings"],
        positions=machine["positions"],
        reflector=machine["reflector"],
    )
    search_settings = SearchSettings(
        base=base,
        rotor_pool=tuple(search["rotor_pool"].split()),
        slots=slots,
        positions=(search["first_positions"].strip().upper(), search["second_positions"].strip().upper()),
        workers=workers,
    )

    return Settings(
        trigrams_file_path=config["INPUT FILES"]["trigrams_file_path"],
        search=search_settings,
        save_trace=save_trace,
        trace_dir=config["OUTPUT"]["trace_dir"],
    )
