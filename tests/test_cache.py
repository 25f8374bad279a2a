from gojump.services.analysis.cache import ResultCache
from gojump.services.analysis.config import AnalysisConfig
from gojump.services.analysis.models import PackageInfo, ParseResult

from conftest import FakeClock


def make_result(path: str = "/pkg") -> ParseResult:
	return ParseResult(packages={path: PackageInfo(path=path, name="pkg")})


def make_cache(clock: FakeClock) -> ResultCache:
	return ResultCache(AnalysisConfig(file_cache_ttl=30, package_cache_ttl=300), clock)


def test_file_hit_within_ttl(clock):
	cache = make_cache(clock)
	result = make_result()
	cache.put("/pkg/a.go", result)

	clock.advance(29)
	assert cache.get("/pkg/a.go") is result


def test_package_tier_serves_sibling_files(clock):
	cache = make_cache(clock)
	result = make_result()
	cache.put("/pkg/a.go", result)

	clock.advance(60)
	assert cache.get("/pkg/b.go") is result
	assert cache.get("/pkg/a.go") is result


def test_entries_expire(clock):
	cache = make_cache(clock)
	cache.put("/pkg/a.go", make_result())

	clock.advance(300)
	assert cache.get("/pkg/a.go") is None


def test_empty_results_are_not_cached(clock):
	cache = make_cache(clock)
	cache.put("/pkg/a.go", ParseResult.empty())
	assert cache.get("/pkg/a.go") is None
	assert len(cache) == 0


def test_invalidate_file_clears_file_and_package(clock):
	cache = make_cache(clock)
	cache.put("/pkg/a.go", make_result())
	assert cache.get("/pkg/b.go") is not None  # warms file tier for b.go
	cache.put("/other/x.go", make_result("/other"))

	cache.invalidate("/pkg/a.go")

	assert cache.get("/pkg/a.go") is None
	assert cache.get("/pkg/b.go") is None
	assert cache.get("/other/x.go") is not None


def test_invalidate_all(clock):
	cache = make_cache(clock)
	cache.put("/pkg/a.go", make_result())
	cache.put("/other/x.go", make_result("/other"))

	cache.invalidate()

	assert len(cache) == 0
	assert cache.get("/other/x.go") is None


def test_package_hit_does_not_extend_lifetime(clock):
	cache = make_cache(clock)
	result = make_result()
	cache.put("/pkg/a.go", result)

	clock.advance(290)
	assert cache.get("/pkg/b.go") is result

	clock.advance(20)
	assert cache.get("/pkg/b.go") is None


def test_result_is_keyed_by_its_package_directory(clock):
	cache = make_cache(clock)
	parent = make_result("/root")
	cache.put("/root/sub/doc.go", parent)

	assert cache.get("/root/other.go") is parent

	cache.invalidate("/root/root.go")
	assert cache.get("/root/sub/doc.go") is None
	assert len(cache) == 0
