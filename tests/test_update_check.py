"""End-to-end update check over in-memory repositories."""

import io

from constants import NotFoundTier
from analysis.update_check import check_requirement, check_updates, lookup_triple
from registry.composer.installed import InstalledRepository
from registry.composer.manifest import parse_requires
from reporting.console import ConsoleSink, ListReporter, TableReporter, format_row
from repository.base import ArrayRepository
from repository.pool import build_global_pool, build_local_pool
from versioning.models import CheckPolicy, Package
from versioning.parser import normalize_version


def make_pkg(name, version, ref=None):
    return Package(name=name, version=normalize_version(version), pretty_version=version, dist_reference=ref)


def make_pools(installed, available, stability_flags=None):
    remote = ArrayRepository(available, name="remote")
    local = InstalledRepository(installed, name="installed")
    return (
        build_local_pool([remote], local, "stable", stability_flags),
        build_global_pool([remote], "stable", stability_flags),
    )


def run_report(reporter_cls, results, verbose=False, policy=CheckPolicy()):
    stream = io.StringIO()
    reporter = reporter_cls(ConsoleSink(stream, verbose=verbose), policy)
    reporter.start()
    for result in results:
        reporter.report(result)
    reporter.finish()
    return stream.getvalue().splitlines()


class TestScenarios:
    """Classification through pools and reporters."""

    def test_update_and_upgrade(self):
        """An in-range update and an out-of-range upgrade are both found."""
        local, remote = make_pools(
            [make_pkg("acme/widget", "1.2.0")],
            [make_pkg("acme/widget", v) for v in ("1.2.0", "1.5.0", "3.0.0")],
        )
        (req,) = parse_requires({"acme/widget": ">=1.0,<2.0"})
        result = check_requirement(req, local, remote)

        assert result.classification.update_available
        assert result.classification.upgrade_available
        assert (result.current_display, result.constrained_display, result.latest_display) == (
            "1.2.0", "1.5.0", "3.0.0",
        )

        lines = run_report(ListReporter, [result])
        assert "acme/widget: update available 1.2.0 => 1.5.0 (within >=1.0,<2.0)" in lines
        assert "acme/widget: upgrade available 1.5.0 => 3.0.0 (requires changing >=1.0,<2.0)" in lines

    def test_up_to_date_only_in_verbose_mode(self):
        """Up-to-date packages are listed only in verbose mode."""
        local, remote = make_pools(
            [make_pkg("acme/stable", "1.4.0")],
            [make_pkg("acme/stable", "1.4.0")],
        )
        results = check_updates(parse_requires({"acme/stable": "^1.0"}), local, remote)
        assert results[0].classification.up_to_date

        quiet_lines = run_report(ListReporter, results)
        assert not any("acme/stable" in line for line in quiet_lines)

        verbose_lines = run_report(ListReporter, results, verbose=True)
        assert "acme/stable: up to date (1.4.0)" in verbose_lines

    def test_always_report_up_to_date_policy(self):
        """The policy can always list up-to-date packages."""
        local, remote = make_pools([make_pkg("acme/stable", "1.4.0")], [make_pkg("acme/stable", "1.4.0")])
        results = check_updates(parse_requires({"acme/stable": "^1.0"}), local, remote)
        lines = run_report(ListReporter, results, policy=CheckPolicy(always_report_up_to_date=True))
        assert "acme/stable: up to date (1.4.0)" in lines

    def test_unknown_package_does_not_stop_the_run(self):
        """A missing package is reported and the run continues."""
        local, remote = make_pools(
            [make_pkg("acme/widget", "1.2.0")],
            [make_pkg("acme/widget", "1.5.0")],
        )
        requirements = parse_requires({"acme/ghost": "*", "acme/widget": "^1.0"})
        results = check_updates(requirements, local, remote)

        assert [r.name for r in results] == ["acme/ghost", "acme/widget"]
        assert results[0].not_found == NotFoundTier.GLOBAL_UNCONSTRAINED
        assert results[1].classification.update_available

        lines = run_report(ListReporter, results)
        assert "!!! acme/ghost global package not found (un-constrained)" in lines

    def test_dev_package_shows_truncated_references(self):
        """Dev versions display their short reference."""
        local, remote = make_pools(
            [make_pkg("acme/dev", "dev-main", ref="abcdef1234567890")],
            [make_pkg("acme/dev", "dev-main", ref="abcdef1234567890")],
            stability_flags={"acme/dev": "dev"},
        )
        (req,) = parse_requires({"acme/dev": "dev-main"})
        result = check_requirement(req, local, remote)
        assert result.current_display == "abcdef1234"
        assert result.constrained_display == "abcdef1234"
        assert result.latest_display == "abcdef1234"


class TestNotFoundTiers:
    """Which lookup failed."""

    def test_not_installed(self):
        """An uninstalled package fails the local lookup."""
        local, remote = make_pools([], [make_pkg("acme/widget", "1.5.0")])
        (req,) = parse_requires({"acme/widget": "^1.0"})
        assert check_requirement(req, local, remote).not_found == NotFoundTier.LOCAL

    def test_nothing_matches_constraint(self):
        """Nothing inside the constraint fails the constrained lookup."""
        local, remote = make_pools([make_pkg("acme/widget", "1.0.0")], [make_pkg("acme/widget", "1.0.0")])
        (req,) = parse_requires({"acme/widget": "^2.0"})
        assert check_requirement(req, local, remote).not_found == NotFoundTier.GLOBAL_CONSTRAINED

    def test_unstable_versions_are_filtered_from_global_pool(self):
        """Betas are installed but filtered from the remote pool."""
        local, remote = make_pools(
            [make_pkg("acme/edge", "2.0.0-beta1")],
            [make_pkg("acme/edge", "2.0.0-beta1")],
        )
        (req,) = parse_requires({"acme/edge": "^2.0"})
        triple = lookup_triple(req, local, remote)
        assert triple.current is not None
        assert triple.constrained is None and triple.latest is None


def test_invalid_constraint_is_reported():
    """A bad constraint is an error row, not a crash."""
    local, remote = make_pools([], [])
    requirements = parse_requires({"acme/broken": "~>1.0", "acme/ghost": "*"})
    results = check_updates(requirements, local, remote)
    assert results[0].error
    assert results[1].not_found == NotFoundTier.GLOBAL_UNCONSTRAINED

    lines = run_report(ListReporter, results)
    assert any(line.startswith('!!! acme/broken invalid constraint "~>1.0"') for line in lines)


class TestAnomaly:
    """Installed version newer than anything available."""

    def setup_method(self):
        local, remote = make_pools([make_pkg("acme/fork", "1.9.0")], [make_pkg("acme/fork", "1.5.0")])
        self.results = check_updates(parse_requires({"acme/fork": "^1.0"}), local, remote)

    def test_classified_as_anomalous(self):
        """Installed newer than available is anomalous."""
        c = self.results[0].classification
        assert c.anomalous and not c.update_available and not c.up_to_date

    def test_reported_by_default(self):
        """Anomalies are reported by default."""
        lines = run_report(ListReporter, self.results)
        assert "acme/fork: installed 1.9.0 is newer than 1.5.0 found in the configured repositories" in lines

    def test_hidden_by_policy(self):
        """The policy can hide anomalies."""
        lines = run_report(ListReporter, self.results, policy=CheckPolicy(report_anomalies=False))
        assert not any("acme/fork" in line for line in lines)


def test_table_output():
    """Table output has a header and one row per package."""
    local, remote = make_pools(
        [make_pkg("acme/widget", "1.2.0")],
        [make_pkg("acme/widget", v) for v in ("1.2.0", "1.5.0", "3.0.0")],
    )
    results = check_updates(parse_requires({"acme/widget": "^1.0"}), local, remote)
    lines = run_report(TableReporter, results)

    assert lines[0] == ""
    assert lines[1] == "Checking for available updates"
    assert lines[2] == "-" * 80
    assert lines[3] == format_row(["Package", "Require", "Current", "Update", "Latest"])
    assert format_row(["acme/widget", "^1.0", "1.2.0", "1.5.0", "3.0.0"]) in lines
