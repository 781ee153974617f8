"""Tests for providers and provider dispatch."""

import asyncio
import json
import os
import subprocess
import tempfile
from pathlib import Path
from typing import List

import pytest

from devguard.checks import GitHealthCheck
from devguard.config import Config
from devguard.core.context import RepoContext
from devguard.core.runner import FULL, GIT_ONLY, SUPABASE_VERIFY, dispatch_provider, run_checks
from devguard.core.scanner import BaseCheck, Category, Issue, Severity
from devguard.errors import CheckFailure
from devguard.providers import (
    DetectionResult,
    Provider,
    StripeProvider,
    SupabaseProvider,
    VercelProvider,
    all_providers,
)
from devguard.utils.git import git_available

STRIPE_LIVE = "sk_live_" + "abcdefghijklmnopqrstuvwxyz123456"
STRIPE_TEST = "sk_test_" + "abcdefghijklmnopqrstuvwxyz123456"

requires_git = pytest.mark.skipif(not git_available(), reason="git executable not available")


def write(root: Path, rel_path: str, content: str) -> Path:
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


def provider_issues(provider: Provider, root: Path, config: Config = None) -> List[Issue]:
    config = config or Config()
    ctx = RepoContext.build(root, config)
    return asyncio.run(provider.run_checks(ctx, config))


class FakeProvider(Provider):
    """Provider with scripted detection and a recorded run."""

    name = "vercel"
    category = Category.VERCEL

    def __init__(self, detected: bool = True, fail_probe: bool = False, fail_run: bool = False):
        self.detected = detected
        self.fail_probe = fail_probe
        self.fail_run = fail_run
        self.runs = 0

    def probe(self, ctx):
        if self.fail_probe:
            raise PermissionError("denied")
        return DetectionResult(detected=self.detected)

    async def run_checks(self, ctx, config):
        self.runs += 1
        if self.fail_run:
            raise RuntimeError("provider crashed")
        return [Issue(severity=Severity.PASS, category=self.category, title="ran", hint="none")]


class TestDispatch:
    """Tests for the enable/detect/force gate."""

    @pytest.mark.parametrize("enabled", [True, False])
    @pytest.mark.parametrize("detected", [True, False])
    @pytest.mark.parametrize("force", [True, False])
    def test_dispatch_matrix(self, enabled, detected, force):
        """Test every (enabled, detected, force) combination."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config = Config()
            config.providers.vercel.enabled = enabled
            ctx = RepoContext.build(tmpdir, config)
            provider = FakeProvider(detected=detected)

            issues = asyncio.run(dispatch_provider(provider, ctx, config, force=force))

            if not enabled:
                assert provider.runs == 0
                assert [(i.severity, i.title) for i in issues] == [
                    (Severity.INFO, "vercel disabled; enable to run checks"),
                ]
            elif not detected and not force:
                assert provider.runs == 0
                assert [(i.severity, i.title) for i in issues] == [
                    (Severity.INFO, "vercel enabled but not detected"),
                ]
            else:
                assert provider.runs == 1
                assert [i.title for i in issues] == ["ran"]
            assert all(i.category == Category.VERCEL for i in issues)

    def test_run_failure_becomes_warning(self):
        """Test that a crashing provider yields one Warning in its category."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config = Config()
            ctx = RepoContext.build(tmpdir, config)

            issues = asyncio.run(dispatch_provider(FakeProvider(fail_run=True), ctx, config))

            assert len(issues) == 1
            assert issues[0].severity == Severity.WARNING
            assert issues[0].category == Category.VERCEL
            assert issues[0].detail == "RuntimeError: provider crashed"

    def test_probe_failure_means_not_detected(self):
        """Test that detection errors are treated as not detected."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config = Config()
            ctx = RepoContext.build(tmpdir, config)
            provider = FakeProvider(fail_probe=True)

            assert provider.detect(ctx).detected is False
            issues = asyncio.run(dispatch_provider(provider, ctx, config))
            assert [i.title for i in issues] == ["vercel enabled but not detected"]

    def test_all_providers(self):
        """Test the closed provider set and its dispatch order."""
        assert [p.name for p in all_providers()] == ["supabase", "vercel", "stripe"]


class TestSupabaseVerify:
    """Tests for the supabase verify profile."""

    def _config(self) -> Config:
        config = Config()
        config.env.required = []
        return config

    def test_disabled_provider(self):
        """Test that a disabled provider yields only its Info and no checks."""
        with tempfile.TemporaryDirectory() as tmpdir:
            write(Path(tmpdir), "supabase/config.toml", "")
            config = self._config()
            config.providers.supabase.enabled = False

            report = asyncio.run(run_checks(tmpdir, config, SUPABASE_VERIFY, force=True))

            supabase = [i for i in report.issues if i.category == Category.SUPABASE]
            assert [(i.severity, i.title) for i in supabase] == [
                (Severity.INFO, "supabase disabled; enable to run checks"),
            ]

    def test_not_detected_without_force(self):
        """Test the Info issue when Supabase is not detected."""
        with tempfile.TemporaryDirectory() as tmpdir:
            report = asyncio.run(run_checks(tmpdir, self._config(), SUPABASE_VERIFY))

            assert [(i.category, i.title) for i in report.issues] == [
                (Category.SUPABASE, "supabase enabled but not detected"),
            ]
            assert report.score.score == 95
            assert report.passed

    def test_force_runs_checks(self):
        """Test that --force runs the checks on an undetected project."""
        with tempfile.TemporaryDirectory() as tmpdir:
            report = asyncio.run(run_checks(tmpdir, self._config(), SUPABASE_VERIFY, force=True))

            assert [i.title for i in report.issues] == ["missing migrations directory"]
            assert not report.passed


class TestSupabaseProvider:
    """Tests for SupabaseProvider class."""

    def test_detection_markers(self):
        """Test each detection marker."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            config = Config()
            provider = SupabaseProvider()
            assert not provider.detect(RepoContext.build(root, config)).detected

            write(root, "package.json", json.dumps({"dependencies": {"@supabase/supabase-js": "^2"}}))
            assert provider.detect(RepoContext.build(root, config)).detected

    def test_migrations(self):
        """Test missing and empty migrations directories."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            config = Config()
            config.env.required = []

            issues = provider_issues(SupabaseProvider(), root, config)
            assert [i.title for i in issues] == ["missing migrations directory"]
            assert issues[0].hint == "create supabase/migrations and commit SQL migration files"

            (root / "supabase" / "migrations").mkdir(parents=True)
            issues = provider_issues(SupabaseProvider(), root, config)
            assert [(i.title, i.file_path) for i in issues] == [
                ("no SQL migration files found", "supabase/migrations"),
            ]

            write(root, "supabase/migrations/2024/001_init.SQL", "create table t ();")
            assert provider_issues(SupabaseProvider(), root, config) == []

    def test_service_role_in_client_code(self):
        """Test one Critical per file and line in client directories only."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            write(root, "supabase/migrations/001.sql", "")
            write(
                root,
                "src/lib/admin.ts",
                "const a = process.env.SUPABASE_SERVICE_ROLE_KEY; // service_role\n"
                "const b = 1;\n"
                "const role = 'service_role';\n",
            )
            write(root, "server/admin.ts", "const key = 'service_role';\n")
            config = Config()
            config.env.required = []

            issues = provider_issues(SupabaseProvider(), root, config)

            assert [(i.severity, i.location) for i in issues] == [
                (Severity.CRITICAL, ("src/lib/admin.ts", 1)),
                (Severity.CRITICAL, ("src/lib/admin.ts", 3)),
            ]

    def test_required_supabase_env(self, monkeypatch):
        """Test that Supabase keys are checked only when listed in env.required."""
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            write(root, "supabase/migrations/001.sql", "")
            write(root, ".env", "SUPABASE_ANON_KEY=anon\n")
            config = Config()
            config.env.required = ["SUPABASE_URL", "SUPABASE_ANON_KEY"]

            issues = provider_issues(SupabaseProvider(), root, config)

            assert [i.title for i in issues] == ["missing required Supabase env var SUPABASE_URL"]


class TestVercelProvider:
    """Tests for VercelProvider class."""

    def test_vercel_json_env_keys(self):
        """Test that nested env keys in vercel.json are reported."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            write(root, "vercel.json", json.dumps({"builds": [{"config": {"env": {"A": "1"}}}]}))

            issues = provider_issues(VercelProvider(), root)

            assert [(i.severity, i.title, i.file_path) for i in issues] == [
                (Severity.INFO, "vercel.json contains env keys", "vercel.json"),
            ]

    def test_invalid_vercel_json_is_ignored(self):
        """Test that an unparsable vercel.json produces nothing."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            write(root, "vercel.json", "{not json")

            assert VercelProvider().detect(RepoContext.build(root, Config())).detected
            assert provider_issues(VercelProvider(), root) == []

    def test_dot_vercel_without_git(self):
        """Test the Info issue when tracking cannot be checked."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            write(root, ".vercel/project.json", "{}")

            issues = provider_issues(VercelProvider(), root)

            assert [(i.severity, i.title) for i in issues] == [
                (Severity.INFO, ".vercel directory exists locally"),
            ]

    @requires_git
    def test_dot_vercel_tracking(self):
        """Test Warning when .vercel is tracked and nothing when it is not."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            subprocess.run(["git", "init", "-q"], cwd=root, check=True, capture_output=True)
            write(root, ".vercel/project.json", "{}")

            assert provider_issues(VercelProvider(), root) == []

            subprocess.run(["git", "add", ".vercel"], cwd=root, check=True, capture_output=True)
            issues = provider_issues(VercelProvider(), root)
            assert [(i.severity, i.title) for i in issues] == [
                (Severity.WARNING, ".vercel directory appears tracked"),
            ]

    @requires_git
    def test_dot_vercel_tracked_in_subdirectory_app(self):
        """Test that tracking is resolved from an app below the git root."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            subprocess.run(["git", "init", "-q"], cwd=root, check=True, capture_output=True)
            app = root / "apps" / "web"
            write(app, "vercel.json", "{}")
            write(app, ".vercel/project.json", "{}")
            write(root, ".vercel/project.json", "{}")
            subprocess.run(["git", "add", "apps"], cwd=root, check=True, capture_output=True)

            issues = provider_issues(VercelProvider(), app)
            assert [(i.severity, i.title, i.file_path) for i in issues] == [
                (Severity.WARNING, ".vercel directory appears tracked", ".vercel"),
            ]

            report = asyncio.run(run_checks(app, Config()))
            vercel = [i for i in report.issues if i.category == Category.VERCEL]
            assert [i.title for i in vercel] == [".vercel directory appears tracked"]


class TestStripeProvider:
    """Tests for StripeProvider class."""

    def test_detection(self, monkeypatch):
        """Test detection from package.json and dotenv keys."""
        monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
        monkeypatch.delenv("STRIPE_PUBLISHABLE_KEY", raising=False)
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            config = Config()
            assert not StripeProvider().detect(RepoContext.build(root, config)).detected

            write(root, ".env.local", "STRIPE_PUBLISHABLE_KEY=pk_test_123\n")
            detection = StripeProvider().detect(RepoContext.build(root, config))
            assert detection.detected
            assert detection.evidence == "STRIPE_PUBLISHABLE_KEY in environment"

    def test_live_test_and_mixed_keys(self):
        """Test live, test and mixed-mode issues from dotenv files."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            write(root, ".env", f"# keys\nSTRIPE_SECRET_KEY={STRIPE_LIVE}\n")
            write(root, ".env.development", f"STRIPE_SECRET_KEY={STRIPE_TEST}\n")

            issues = provider_issues(StripeProvider(), root)

            assert [(i.severity, i.title, i.location) for i in issues] == [
                (Severity.CRITICAL, "live Stripe key found in dotenv file", (".env", 2)),
                (Severity.WARNING, "test Stripe key found in dotenv file", (".env.development", 1)),
                (Severity.WARNING, "mixed Stripe modes detected", None),
            ]

    def test_mixed_modes_reported_without_live_warnings(self):
        """Test that warn_live_keys = false still counts live keys for mixed mode."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            write(root, ".env", f"LIVE={STRIPE_LIVE}\nTEST={STRIPE_TEST}\n")
            config = Config()
            config.providers.stripe.warn_live_keys = False

            issues = provider_issues(StripeProvider(), root, config)

            assert [i.title for i in issues] == [
                "test Stripe key found in dotenv file",
                "mixed Stripe modes detected",
            ]


class CrashingCheck(BaseCheck):
    """Check module that always raises."""

    def __init__(self):
        super().__init__(name="secrets", category=Category.SECRETS)

    async def run(self, ctx, config):
        raise RuntimeError("check crashed")


class TestRunChecks:
    """Tests for run_checks with injected modules."""

    def test_crashing_check_is_isolated(self):
        """Test that a failing check yields one Warning and the rest still run."""
        with tempfile.TemporaryDirectory() as tmpdir:
            provider = FakeProvider()

            report = asyncio.run(run_checks(
                tmpdir,
                Config(),
                FULL,
                checks=[CrashingCheck(), GitHealthCheck()],
                providers=[provider],
            ))

            assert [(i.severity, i.category, i.title) for i in report.issues] == [
                (Severity.WARNING, Category.SECRETS, "secrets check failed"),
                (Severity.INFO, Category.GIT, "not a git repo"),
                (Severity.PASS, Category.VERCEL, "ran"),
            ]
            assert report.issues[0].detail == "RuntimeError: check crashed"
            assert provider.runs == 1
            assert report.score.score == 80

    def test_profile_filters_injected_modules(self):
        """Test that only modules named by the profile run."""
        with tempfile.TemporaryDirectory() as tmpdir:
            provider = FakeProvider()

            report = asyncio.run(run_checks(
                tmpdir,
                Config(),
                GIT_ONLY,
                checks=[CrashingCheck(), GitHealthCheck()],
                providers=[provider],
            ))

            assert [i.title for i in report.issues] == ["not a git repo"]
            assert provider.runs == 0


unreadable_files_possible = pytest.mark.skipif(
    not hasattr(os, "geteuid") or os.geteuid() == 0,
    reason="file permissions are not enforced for this user",
)


class TestSupabaseUnreadableClientFile:
    """Tests for client files that cannot be read."""

    @unreadable_files_possible
    def test_unreadable_file_fails_the_provider(self):
        """Test CheckFailure from the provider and one Warning from dispatch."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            write(root, "supabase/migrations/001.sql", "")
            locked = write(root, "src/admin.ts", "const role = 'service_role';\n")
            locked.chmod(0)
            config = Config()
            config.env.required = []
            try:
                ctx = RepoContext.build(root, config)

                with pytest.raises(CheckFailure, match="cannot read src/admin.ts"):
                    asyncio.run(SupabaseProvider().run_checks(ctx, config))

                issues = asyncio.run(dispatch_provider(SupabaseProvider(), ctx, config))
                assert [(i.severity, i.category, i.title) for i in issues] == [
                    (Severity.WARNING, Category.SUPABASE, "supabase check failed"),
                ]
                assert issues[0].detail.startswith("CheckFailure: cannot read src/admin.ts")
            finally:
                locked.chmod(0o644)
