"""Tests for the command line entry point."""

import pytest

from ng2react.__main__ import build_parser, main


COMPONENT = """import { Component } from '@angular/core';

@Component({selector: 'app-title', template: '<h1>{{ title | uppercase }}</h1>'})
export class TitleComponent {
  title = 'hello';
}
"""


@pytest.fixture
def src(tmp_path):
    root = tmp_path / "src"
    (root / "app").mkdir(parents=True)
    (root / "app" / "title.component.ts").write_text(COMPONENT, encoding="utf-8")
    return root


class TestArguments:
    def test_defaults(self):
        args = build_parser().parse_args(["src", "out"])
        assert args.src == "src"
        assert args.target == "out"
        assert args.policy is None
        assert args.log_level == "INFO"
        assert args.dry_run is False

    def test_invalid_log_level(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["src", "out", "--log-level", "LOUD"])


class TestMain:
    def test_success(self, src, tmp_path):
        target = tmp_path / "out"
        assert main([str(src), str(target)]) == 0
        tsx = (target / "app" / "title.component.tsx").read_text(encoding="utf-8")
        assert "<h1>{uppercase(title)}</h1>" in tsx

    def test_policy_file(self, src, tmp_path):
        policy = tmp_path / "policy.yaml"
        policy.write_text('pipes:\n  uppercase:\n    template: "$inner.toUpperCase()"\n', encoding="utf-8")
        target = tmp_path / "out"
        assert main([str(src), str(target), "--policy", str(policy)]) == 0
        tsx = (target / "app" / "title.component.tsx").read_text(encoding="utf-8")
        assert "<h1>{title.toUpperCase()}</h1>" in tsx

    def test_dry_run(self, src, tmp_path):
        target = tmp_path / "out"
        assert main([str(src), str(target), "--dry-run", "--log-level", "DEBUG"]) == 0
        assert not target.exists()

    def test_failed_file_sets_exit_code(self, src, tmp_path):
        (src / "app" / "bad.component.ts").write_text(
            "@Component({selector: 'app-bad', template: '<p #ref></p>'})\nexport class BadComponent { }\n",
            encoding="utf-8",
        )
        target = tmp_path / "out"
        assert main([str(src), str(target)]) == 1
        assert (target / "app" / "title.component.tsx").is_file()

    def test_missing_policy_file(self, src, tmp_path):
        assert main([str(src), str(tmp_path / "out"), "--policy", str(tmp_path / "none.yaml")]) == 1

    def test_missing_source(self, tmp_path):
        assert main([str(tmp_path / "none"), str(tmp_path / "out")]) == 1
