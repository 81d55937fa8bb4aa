"""Tests for pools, stability filtering and pool construction."""

from registry.composer.installed import InstalledRepository
from repository.base import ArrayRepository, package_matches
from repository.platform import PlatformRepository
from repository.pool import Pool, build_global_pool, build_local_pool, stability_rank
from versioning.constraints import parse_constraints
from versioning.models import Package
from versioning.parser import normalize_version


def make_pkg(name, version, **kwargs):
    return Package(name=name, version=normalize_version(version), pretty_version=version, **kwargs)


def versions(packages):
    return sorted(p.pretty_version for p in packages)


def test_stability_rank_order():
    """Ranks grow from stable to dev; names are case-insensitive."""
    assert stability_rank("stable") < stability_rank("RC") < stability_rank("beta")
    assert stability_rank("beta") < stability_rank("alpha") < stability_rank("dev")
    assert stability_rank("rc") == stability_rank("RC")


class TestStabilityFiltering:
    """Minimum stability and per-package flags."""

    def setup_method(self):
        self.repo = ArrayRepository([
            make_pkg("acme/a", "1.0.0"),
            make_pkg("acme/a", "1.1.0-beta1"),
            make_pkg("acme/a", "dev-main"),
        ])

    def test_minimum_stability_stable(self):
        """Only stable versions pass a stable minimum."""
        pool = Pool("stable")
        pool.add_repository(self.repo)
        assert versions(pool.what_provides("acme/a", None, True)) == ["1.0.0"]

    def test_minimum_stability_dev(self):
        """Everything passes a dev minimum."""
        pool = Pool("dev")
        pool.add_repository(self.repo)
        assert len(pool.what_provides("acme/a", None, True)) == 3

    def test_flag_overrides_minimum_stability(self):
        """A per-package flag lowers the minimum for that package."""
        pool = Pool("stable", {"ACME/A": "beta"})
        pool.add_repository(self.repo)
        assert versions(pool.what_provides("acme/a", None, True)) == ["1.0.0", "1.1.0-beta1"]

    def test_installed_repository_is_exempt(self):
        """Installed packages are visible whatever their stability."""
        pool = Pool("stable")
        pool.add_repository(InstalledRepository([make_pkg("acme/a", "1.1.0-beta1")]))
        assert versions(pool.what_provides("acme/a", None, True)) == ["1.1.0-beta1"]

    def test_constraint_is_applied(self):
        """Only versions inside the constraint are returned."""
        pool = Pool("dev")
        pool.add_repository(self.repo)
        found = pool.what_provides("acme/a", parse_constraints("^1.0"), True)
        assert versions(found) == ["1.0.0", "1.1.0-beta1"]

    def test_empty_result_is_not_an_error(self):
        """Unknown names yield an empty list."""
        pool = Pool()
        pool.add_repository(self.repo)
        assert pool.what_provides("acme/unknown", None, True) == []


class TestNameMatching:
    """Exact names vs provide/replace links."""

    def setup_method(self):
        self.fork = make_pkg("acme/fork", "2.0.0", replaces=(("acme/orig", "self.version"),))
        self.impl = make_pkg("acme/impl", "1.0.0", provides=(("psr/log-implementation", "1.0.0"),))

    def test_exact_name_ignores_links(self):
        """Exact matching does not follow replace links."""
        assert not package_matches(self.fork, "acme/orig", None, exact_name_only=True)

    def test_replace_with_self_version(self):
        """self.version replaces match at the package's own version."""
        assert package_matches(self.fork, "acme/orig", None, exact_name_only=False)
        assert package_matches(self.fork, "acme/orig", parse_constraints("^2.0"), exact_name_only=False)
        assert not package_matches(self.fork, "acme/orig", parse_constraints("^1.0"), exact_name_only=False)

    def test_provide_with_fixed_version(self):
        """Provide links match at their declared version."""
        assert package_matches(self.impl, "psr/log-implementation", parse_constraints("1.0.0"), exact_name_only=False)

    def test_name_is_case_insensitive(self):
        """Package names match case-insensitively."""
        assert package_matches(self.fork, "ACME/Fork")

    def test_pool_passes_flag_through(self):
        """must_match_name controls link matching in the pool."""
        pool = Pool()
        pool.add_repository(ArrayRepository([self.fork]))
        assert pool.what_provides("acme/orig", None, must_match_name=True) == []
        assert pool.what_provides("acme/orig", None, must_match_name=False) == [self.fork]


class TestPoolConstruction:
    """Global and local pool builders."""

    def setup_method(self):
        self.remote = ArrayRepository(name="remote")
        self.inline = ArrayRepository(name="inline")
        self.platform = PlatformRepository({"php": "8.2.0"}, detect=False)

    def test_global_pool_has_every_repository(self):
        """The global pool holds every configured repository in order."""
        pool = build_global_pool([self.remote, self.inline])
        assert pool.repositories == [self.remote, self.inline]

    def test_global_pool_platform_first(self):
        """The platform repository comes first when included."""
        pool = build_global_pool([self.remote], platform_repository=self.platform)
        assert pool.repositories == [self.platform, self.remote]

    def test_local_pool_uses_installed_repository(self):
        """The local pool holds only the installed repository."""
        installed = InstalledRepository(name="installed")
        pool = build_local_pool([self.remote, self.inline], installed)
        assert pool.repositories == [installed]

    def test_local_pool_falls_back_to_all_repositories(self):
        """Without installed packages the local pool uses every repository."""
        pool = build_local_pool([self.remote, self.inline], None)
        assert pool.repositories == [self.remote, self.inline]

    def test_local_pool_with_platform(self):
        """The platform repository precedes the installed one."""
        installed = InstalledRepository(name="installed")
        pool = build_local_pool([self.remote], installed, platform_repository=self.platform)
        assert pool.repositories == [self.platform, installed]

    def test_stability_settings_are_passed(self):
        """Minimum stability and flags reach the pool."""
        pool = build_global_pool([self.remote], "beta", {"acme/a": "dev"})
        assert pool.minimum_stability == "beta"
        assert pool.stability_flags == {"acme/a": "dev"}
