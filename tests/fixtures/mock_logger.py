"""
Recording logger for tests.

Stands in for HostStatLogger: every level method (standard and custom)
records the formatted message instead of emitting it.
"""

from collections import defaultdict
from typing import Dict, List

LEVELS = (
    'debug', 'info', 'warning', 'error', 'critical',
    'result', 'status', 'verbose', 'verboser', 'ridiculous',
)


class MockLogger:
    """
    Logger double that keeps messages per level.

    Example:
        logger = MockLogger()
        DomainCollector(DiskAdapter(), logger=logger).collect([bad_snapshot])
        logger.assert_logged('warning', 'Skipping disk entity')
    """

    def __init__(self):
        self.messages: Dict[str, List[str]] = defaultdict(list)
        for level in LEVELS:
            setattr(self, level, self._recorder(level))

    def _recorder(self, level: str):
        def record(msg, *args, **kwargs):
            text = str(msg)
            if args:
                text = text % args
            self.messages[level].append(text)
        return record

    @property
    def call_count(self) -> Dict[str, int]:
        return {level: len(self.messages[level]) for level in LEVELS}

    def get_messages(self, level: str) -> List[str]:
        return list(self.messages[level])

    def has_message(self, level: str, substring: str) -> bool:
        return any(substring in text for text in self.messages[level])

    def assert_logged(self, level: str, substring: str):
        assert self.has_message(level, substring), (
            f"no {level} message containing {substring!r}; got {self.messages[level]}"
        )


def create_mock_logger() -> MockLogger:
    return MockLogger()
