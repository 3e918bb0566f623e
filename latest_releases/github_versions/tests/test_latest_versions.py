import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest import mock

import requests

from latest_releases.github_versions.errors import RateLimitExceededError
from latest_releases.github_versions.input_loader import RepositoryInput
from latest_releases.github_versions.latest_versions import (
    RepositoryReport,
    check_repository,
    collect_latest_versions,
    format_report_line,
    main,
)

release_tags = {
    ("kubernetes", "kubernetes"): ["v1.8.11", "v1.9.6", "v1.10.1", "v1.9.5", "v1.8.10", "v1.10.0",
                                   "v1.7.14", "v1.8.9", "v1.9.5", "v1.11.0-beta.1", "nightly"],
    ("helm", "helm"): ["v2.2.6", "v2.2.2", "v2.4.8"],
}


class FakeReleaseSource:
    def __init__(self, tags: dict, failures: dict = None):
        self.tags = tags
        self.failures = failures or {}
        self.calls = []

    def fetch_release_tags(self, owner: str, repo: str) -> list:
        self.calls.append((owner, repo))
        if (owner, repo) in self.failures:
            raise self.failures[(owner, repo)]
        return self.tags.get((owner, repo), [])


class TestFormatReportLine(unittest.TestCase):

    def test_versions(self):
        report = RepositoryReport("kubernetes", "kubernetes", "1.8.0", ["1.10.1", "1.9.6", "1.8.11"])
        self.assertEqual(format_report_line(report), "latest versions of kubernetes/kubernetes: [1.10.1 1.9.6 1.8.11]")

    def test_empty(self):
        report = RepositoryReport("helm", "helm", "2.6.1")
        self.assertEqual(format_report_line(report), "latest versions of helm/helm: []")


class TestCheckRepository(unittest.TestCase):

    def test_selects_latest_versions(self):
        report = check_repository(RepositoryInput("kubernetes", "kubernetes", "1.8.0", 2), FakeReleaseSource(release_tags))
        self.assertTrue(report.ok)
        self.assertEqual(report.versions, ["1.10.1", "1.9.6", "1.8.11"])

    def test_nothing_above_minimum(self):
        report = check_repository(RepositoryInput("helm", "helm", "2.6.1", 2), FakeReleaseSource(release_tags))
        self.assertTrue(report.ok)
        self.assertEqual(report.versions, [])

    def test_invalid_minimum_not_fetched(self):
        source = FakeReleaseSource(release_tags)
        report = check_repository(RepositoryInput("helm", "helm", "2.6", 2), source)
        self.assertFalse(report.ok)
        self.assertIn("2.6", report.error)
        self.assertEqual(source.calls, [])

    def test_fetch_failure_recorded(self):
        source = FakeReleaseSource(release_tags, {("helm", "helm"): requests.ConnectionError("boom")})
        report = check_repository(RepositoryInput("helm", "helm", "2.0.0", 2), source)
        self.assertFalse(report.ok)
        self.assertIn("boom", report.error)

    def test_rate_limit_propagates(self):
        source = FakeReleaseSource(release_tags, {("helm", "helm"): RateLimitExceededError("limit")})
        with self.assertRaises(RateLimitExceededError):
            check_repository(RepositoryInput("helm", "helm", "2.0.0", 2), source)


class TestCollectLatestVersions(unittest.TestCase):

    def test_invalid_request_does_not_stop_others(self):
        inputs = [
            RepositoryInput("helm", "helm", "bad", 1),
            RepositoryInput("kubernetes", "kubernetes", "1.8.12", 2),
            RepositoryInput("helm", "helm", "2.6.1", 3),
        ]
        output = io.StringIO()
        with redirect_stdout(output):
            reports = collect_latest_versions(inputs, FakeReleaseSource(release_tags))

        self.assertEqual([r.ok for r in reports], [False, True, True])
        self.assertEqual(output.getvalue().splitlines(), [
            "latest versions of kubernetes/kubernetes: [1.10.1 1.9.6]",
            "latest versions of helm/helm: []",
        ])

    def test_rate_limit_stops_processing(self):
        inputs = [
            RepositoryInput("kubernetes", "kubernetes", "1.8.0", 1),
            RepositoryInput("helm", "helm", "2.0.0", 2),
            RepositoryInput("golang", "go", "1.0.0", 3),
        ]
        source = FakeReleaseSource(release_tags, {("helm", "helm"): RateLimitExceededError("limit")})
        with redirect_stdout(io.StringIO()):
            with self.assertRaises(RateLimitExceededError):
                collect_latest_versions(inputs, source)
        self.assertEqual(source.calls, [("kubernetes", "kubernetes"), ("helm", "helm")])

    def test_finished_reports_kept_after_rate_limit(self):
        inputs = [
            RepositoryInput("kubernetes", "kubernetes", "1.10.0", 1),
            RepositoryInput("helm", "helm", "2.0.0", 2),
        ]
        source = FakeReleaseSource(release_tags, {("helm", "helm"): RateLimitExceededError("limit")})
        reports = []
        with redirect_stdout(io.StringIO()):
            with self.assertRaises(RateLimitExceededError):
                collect_latest_versions(inputs, source, reports)
        self.assertEqual([(r.repo, r.versions) for r in reports], [("kubernetes", ["1.10.1"])])


class TestMain(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.input_file = os.path.join(self.temp_dir.name, "input.csv")
        self.output_file = os.path.join(self.temp_dir.name, "output.json")

    def tearDown(self):
        self.temp_dir.cleanup()

    def write_input(self, content: str):
        with open(self.input_file, "w") as f:
            f.write(content)

    def run_main(self, tags: dict, failures: dict = None, *extra_args) -> tuple[int, str]:
        source = FakeReleaseSource(tags, failures)
        output = io.StringIO()
        with mock.patch.dict(os.environ, {}, clear=True), \
                mock.patch("latest_releases.github_versions.latest_versions.GitHubReleaseSource",
                           return_value=source), \
                redirect_stdout(output):
            exit_code = main([self.input_file, *extra_args])
        return exit_code, output.getvalue()

    def test_success_with_output_file(self):
        self.write_input("repository,min_version\nkubernetes/kubernetes,1.8.0\nhelm/helm,2.6.1\n")

        exit_code, output = self.run_main(release_tags, None, "--output-file", self.output_file)

        self.assertEqual(exit_code, 0)
        self.assertEqual(output.splitlines(), [
            "latest versions of kubernetes/kubernetes: [1.10.1 1.9.6 1.8.11]",
            "latest versions of helm/helm: []",
        ])
        with open(self.output_file, "r") as f:
            saved = json.load(f)
        self.assertEqual(saved, [
            {"repository": "kubernetes/kubernetes", "min_version": "1.8.0",
             "versions": ["1.10.1", "1.9.6", "1.8.11"]},
            {"repository": "helm/helm", "min_version": "2.6.1", "versions": []},
        ])

    def test_invalid_request_exit_code(self):
        self.write_input("helm/helm,two\nkubernetes/kubernetes,1.10.0\n")

        exit_code, output = self.run_main(release_tags)

        self.assertEqual(exit_code, 1)
        self.assertEqual(output, "latest versions of kubernetes/kubernetes: [1.10.1]\n")

    def test_malformed_input_file(self):
        self.write_input("not a repository line\n")

        exit_code, output = self.run_main(release_tags)

        self.assertEqual(exit_code, 1)
        self.assertEqual(output, "")

    def test_rate_limit_exit_code(self):
        self.write_input("helm/helm,2.0.0\nkubernetes/kubernetes,1.10.0\n")

        exit_code, output = self.run_main(release_tags, {("helm", "helm"): RateLimitExceededError("limit")})

        self.assertEqual(exit_code, 1)
        self.assertEqual(output, "")

    def test_rate_limit_saves_finished_reports(self):
        self.write_input("kubernetes/kubernetes,1.10.0\nhelm/helm,2.0.0\ngolang/go,1.0.0\n")

        exit_code, output = self.run_main(release_tags, {("helm", "helm"): RateLimitExceededError("limit")},
                                          "--output-file", self.output_file)

        self.assertEqual(exit_code, 1)
        self.assertEqual(output, "latest versions of kubernetes/kubernetes: [1.10.1]\n")
        with open(self.output_file, "r") as f:
            saved = json.load(f)
        self.assertEqual(saved, [
            {"repository": "kubernetes/kubernetes", "min_version": "1.10.0", "versions": ["1.10.1"]},
        ])


if __name__ == '__main__':
    unittest.main()
