# config.py
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class OutputFormat(Enum):
    TEXT = auto()
    JSON = auto()


@dataclass
class Config:
    """Run settings of the command-line tool, built from the parsed arguments."""

    output_format: OutputFormat = OutputFormat.TEXT
    max_result_count: int = 5
    recursive_depth: int = 0
    log_level: str = "WARNING"
    output: Optional[str] = None
    min_delay: float = 2
    max_delay: float = 5

    @classmethod
    def from_args(cls, args) -> "Config":
        return cls(
            output_format=OutputFormat.JSON if args.json else OutputFormat.TEXT,
            max_result_count=args.count,
            recursive_depth=args.recursive_depth,
            log_level="DEBUG" if args.verbose else args.log_level.upper(),
            output=args.output,
            min_delay=args.min_delay,
            max_delay=args.max_delay,
        )
