"""Tests for the project migrator."""

import pytest

from ng2react.core.errors import ConfigurationError
from ng2react.core.project import ProjectMigrator, should_skip_directory


HERO_COMPONENT = """import { Component, Input } from '@angular/core';

@Component({
  selector: 'app-hero',
  templateUrl: './hero.component.html',
  styleUrls: ['./hero.component.css']
})
export class HeroComponent {
  @Input() name: string;
}
"""

LIST_COMPONENT = """import { Component } from '@angular/core';

@Component({
  selector: 'app-list',
  template: '<ul><li *ngFor="let h of heroes"><app-hero [name]="h | uppercase"></app-hero></li></ul>'
})
export class ListComponent {
  heroes = ['a', 'b'];
}
"""

NO_SELECTOR_COMPONENT = """
@Component({template: '<p></p>'})
export class BadComponent { }
"""

BROKEN_TEMPLATE_COMPONENT = """
@Component({selector: 'app-broken', template: '<div></span>'})
export class BrokenComponent { }
"""


def write(path, text: str):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def project(tmp_path):
    src = tmp_path / "src"
    write(src / "app" / "hero" / "hero.component.ts", HERO_COMPONENT)
    write(src / "app" / "hero" / "hero.component.html", "<h2>{{name}}</h2>\n")
    write(src / "app" / "hero" / "hero.component.css", "h2 { color: red; }\n")
    write(src / "app" / "list" / "list.component.ts", LIST_COMPONENT)
    write(src / "app" / "models.ts", "export interface Hero { name: string; }\n")
    write(src / "assets" / "logo.svg", "<svg></svg>\n")
    write(src / "node_modules" / "lib" / "index.js", "module.exports = {};\n")
    write(src / ".cache" / "state.json", "{}\n")
    return src, tmp_path / "react"


class TestSkipDirectories:
    def test_skip(self):
        assert should_skip_directory("node_modules")
        assert should_skip_directory(".git")
        assert should_skip_directory(".angular")
        assert not should_skip_directory("app")


class TestMigration:
    def test_counts(self, project):
        src, target = project
        result = ProjectMigrator(str(src), str(target)).migrate()
        assert result.errors == []
        assert result.ok
        assert result.components_found == 2
        assert result.files_transformed == 2
        assert result.files_copied == 3
        assert result.files_skipped == 1
        assert result.elapsed_seconds >= 0

    def test_layout(self, project):
        src, target = project
        ProjectMigrator(str(src), str(target)).migrate()

        assert (target / "app" / "hero" / "hero.component.tsx").is_file()
        assert (target / "app" / "list" / "list.component.tsx").is_file()
        assert (target / "app" / "hero" / "hero.component.css").is_file()
        assert (target / "app" / "models.ts").is_file()
        assert (target / "assets" / "logo.svg").is_file()

        assert not (target / "app" / "hero" / "hero.component.ts").exists()
        assert not (target / "app" / "hero" / "hero.component.html").exists()
        assert not (target / "node_modules").exists()
        assert not (target / ".cache").exists()

    def test_transformed_content(self, project):
        src, target = project
        ProjectMigrator(str(src), str(target)).migrate()

        hero = (target / "app" / "hero" / "hero.component.tsx").read_text(encoding="utf-8")
        assert "@angular" not in hero
        assert "import './hero.component.css';" in hero
        assert "export function HeroComponent({ name }: { name: string })" in hero
        assert "<h2>{name}</h2>" in hero

        hero_list = (target / "app" / "list" / "list.component.tsx").read_text(encoding="utf-8")
        assert "import {HeroComponent} from '../hero/hero.component';" in hero_list
        assert "import {uppercase} from '../../pipes';" in hero_list
        assert "<HeroComponent name={uppercase(h)} />" in hero_list

    def test_copied_files_are_unchanged(self, project):
        src, target = project
        ProjectMigrator(str(src), str(target)).migrate()
        models = (target / "app" / "models.ts").read_text(encoding="utf-8")
        assert models == "export interface Hero { name: string; }\n"

    def test_dry_run_writes_nothing(self, project):
        src, target = project
        result = ProjectMigrator(str(src), str(target), dry_run=True).migrate()
        assert result.files_transformed == 2
        assert result.files_copied == 3
        assert not target.exists()

    def test_target_inside_source_is_not_walked(self, project):
        src, _ = project
        target = src / "react"
        ProjectMigrator(str(src), str(target)).migrate()
        result = ProjectMigrator(str(src), str(target)).migrate()
        assert result.files_transformed == 2
        assert result.files_copied == 3

    def test_missing_source(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ProjectMigrator(str(tmp_path / "nope"), str(tmp_path / "out")).migrate()


class TestFailures:
    def test_scan_failure_is_recorded(self, project):
        src, target = project
        write(src / "broken" / "bad.component.ts", NO_SELECTOR_COMPONENT)
        result = ProjectMigrator(str(src), str(target)).migrate()

        assert len(result.errors) == 1
        assert result.errors[0].startswith("broken/bad.component.ts: ")
        assert not result.ok
        assert result.files_transformed == 2
        assert result.files_skipped == 2
        assert not (target / "broken").exists()

    def test_transform_failure_does_not_stop_the_run(self, project):
        src, target = project
        write(src / "app" / "broken.component.ts", BROKEN_TEMPLATE_COMPONENT)
        result = ProjectMigrator(str(src), str(target)).migrate()

        assert len(result.errors) == 1
        assert result.errors[0].startswith("app/broken.component.ts: ")
        assert "Unexpected closing tag" in result.errors[0]
        assert result.components_found == 3
        assert result.files_transformed == 2
        assert not (target / "app" / "broken.component.tsx").exists()
        assert (target / "app" / "hero" / "hero.component.tsx").is_file()
