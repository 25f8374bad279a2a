from textwrap import dedent

import pytest

from gojump.services.analysis import AnalysisConfig, AnalysisService


class FakeClock:
	def __init__(self, now: float = 1000.0):
		self.now = now

	def __call__(self) -> float:
		return self.now

	def advance(self, seconds: float) -> None:
		self.now += seconds


def line_of(source: str, needle: str) -> int:
	"""0-based index of the first line of dedented source containing needle."""
	for i, line in enumerate(dedent(source).splitlines()):
		if needle in line:
			return i
	raise AssertionError(f"{needle!r} not in source")


@pytest.fixture
def clock():
	return FakeClock()


@pytest.fixture
def config():
	return AnalysisConfig()


@pytest.fixture
def service(config, clock):
	return AnalysisService(config, clock=clock)


@pytest.fixture
def write_go(tmp_path):
	def _write(name: str, source: str, directory=None) -> str:
		target = directory if directory is not None else tmp_path
		target.mkdir(parents=True, exist_ok=True)
		path = target / name
		path.write_text(dedent(source), encoding="utf-8")
		return str(path)

	return _write
