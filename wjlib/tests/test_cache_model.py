import os

import pandas as pd
import pytest

import wjlib.cache_model as cache_model


def make_table() -> pd.DataFrame:
    return pd.DataFrame({"froude_number": [0.24, 0.26], "resistance": [10.0, 12.5]})


def test_store_and_lookup(tmp_path):
    path = str(tmp_path / "results" / "spp.csv")
    cache = cache_model.ResultCache(path)

    assert cache.lookup() is None

    cache.store(make_table())

    assert cache.exists()
    pd.testing.assert_frame_equal(cache.lookup(), make_table())


def test_max_age_with_injected_clock(tmp_path):
    path = str(tmp_path / "spp.csv")
    make_table().to_csv(path, index=False)
    os.utime(path, (1000.0, 1000.0))

    fresh = cache_model.ResultCache(path, clock=lambda: 1005.0, max_age=10.0)
    stale = cache_model.ResultCache(path, clock=lambda: 1100.0, max_age=10.0)

    assert not fresh.is_stale()
    assert stale.is_stale()
    with pytest.warns(UserWarning, match="stale"):
        assert stale.lookup() is None


def test_newer_dependency_invalidates(tmp_path):
    path = str(tmp_path / "spp.csv")
    dependency = str(tmp_path / "R100.dat")
    make_table().to_csv(path, index=False)
    with open(dependency, "w") as f:
        f.write("0.0 1.0\n")
    os.utime(path, (1000.0, 1000.0))
    os.utime(dependency, (2000.0, 2000.0))

    cache = cache_model.ResultCache(path, clock=lambda: 3000.0, depends_on=[dependency])

    assert cache.is_stale()


def test_custom_policy(tmp_path):
    path = str(tmp_path / "spp.csv")
    make_table().to_csv(path, index=False)

    cache = cache_model.ResultCache(path, policy=lambda mtime, now: True)

    assert cache.is_stale()


def test_get_or_compute(tmp_path):
    path = str(tmp_path / "spp.csv")
    cache = cache_model.ResultCache(path)
    calls = []

    def compute():
        calls.append(1)
        return make_table()

    first = cache.get_or_compute(compute)
    second = cache.get_or_compute(compute)

    assert len(calls) == 1
    pd.testing.assert_frame_equal(first, second)

    cache.invalidate()
    assert not cache.exists()
    cache.get_or_compute(compute)
    assert len(calls) == 2
