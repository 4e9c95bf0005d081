"""Tests for the source rewriter and the import resolver."""

import logging
import re

import pytest

from ng2react.core.ast_parser import parse_typescript
from ng2react.core.components import ComponentRecord, ProjectInfo, find_components
from ng2react.core.errors import ConfigurationError, NotSupportedError
from ng2react.core.transform import transform_component_file


def normalize(code: str) -> str:
    return re.sub(r"\s+", " ", code).strip()


def transform_code(source: str, component_map=None, templates=None) -> str:
    templates = templates or {}
    project_info = ProjectInfo(
        src_root="",
        component_map=component_map or {},
        template_loader=lambda path: templates[path],
    )
    return transform_component_file(source, "foo.ts", project_info)


def assert_code(actual: str, expected: str):
    assert normalize(actual) == normalize(expected)


# =========================================================================
# Tests: Component scanning
# =========================================================================

class TestScanComponents:
    def test_scan_components(self):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent { }
    """
        comps = find_components(parse_typescript(source, "foo.ts"))
        assert len(comps) == 1
        comp = comps[0]
        assert comp.file == "foo.ts"
        assert comp.selector == "foo-bar"
        assert comp.name == "FooBarComponent"

    def test_scan_multiple_components(self):
        source = """
    @Component({selector: 'a-one'})
    export class OneComponent { }

    class Helper { }

    @Component({selector: 'a-two', template: '<b></b>'})
    class TwoComponent { }
    """
        comps = find_components(parse_typescript(source, "foo.ts"))
        assert [(c.selector, c.name) for c in comps] == [
            ("a-one", "OneComponent"),
            ("a-two", "TwoComponent"),
        ]

    def test_component_without_selector(self):
        source = """
    @Component({template: '<div></div>'})
    export class FooBarComponent { }
    """
        with pytest.raises(ConfigurationError):
            find_components(parse_typescript(source, "foo.ts"))


# =========================================================================
# Tests: Component classes
# =========================================================================

class TestTransformComponent:
    def test_empty_component(self):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent { }
    """
        assert_code(transform_code(source), """
    import React from 'react';
    export function FooBarComponent() {
        return ();
    }""")

    def test_getter_named_state(self):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent {
        statevar = 42;
        get state() { return 27; }
    }
    """
        assert_code(transform_code(source), """
    import React from 'react';
    export function FooBarComponent() {
        const [$state, setState] = React.useState(()=>{
            const initialState = { statevar: 42 };
            return initialState;
        });
        const { statevar } = $state;
        const state = 27;
        return ();
    }""")

    def test_multiline_getter(self):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent {
        get foo(): number {
            const baz = 27;
            return baz;
        }
    }
    """
        assert_code(transform_code(source), """
    import React from 'react';
    export function FooBarComponent() {
        const foo /* getter transformed to immediately invoked function */ = (() => {
            const baz = 27;
            return baz;
        })();
        return ();
    }""")

    def test_input_with_default_value(self):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent {
        @Input() width = 16;
    }
    """
        assert_code(transform_code(source), """
    import React from 'react';
    export function FooBarComponent({ width = 16 }: { width?: number }) {
        return ();
    }""")

    def test_multiple_inputs(self):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent {
        @Input() first = 'a';
        @Input() second = 'b';
    }
    """
        assert_code(transform_code(source), """
    import React from 'react';
    export function FooBarComponent({ first = 'a', second = 'b' }: { first?: string; second?: string }) {
        return ();
    }""")

    def test_output(self):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent {
        @Output() zap = new EventEmitter<number>();
    }
    """
        assert_code(transform_code(source), """
    import React from 'react';
    export function FooBarComponent({ zap }: { zap: (x: number) => void }) {
        return ();
    }""")

    def test_readonly_property(self):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent {
        readonly width = 16;
    }
    """
        assert_code(transform_code(source), """
    import React from 'react';
    export function FooBarComponent() {
        const width = 16;
        return ();
    }""")

    def test_unsupported_member(self):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent {
        [key: string]: any;
    }
    """
        with pytest.raises(NotSupportedError):
            transform_code(source)


# =========================================================================
# Tests: State
# =========================================================================

class TestState:
    def test_constructor_body_inlined(self):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent {
        baz!: number;
        constructor() {
            this.baz = 27;
        }
    }
    """
        assert_code(transform_code(source), """
    import React from 'react';
    export function FooBarComponent() {
        const [state, setState] = React.useState(()=>{
            const initialState = { baz: undefined as number };
            /* inlined constructor body */
            { initialState.baz = 27; }
            return initialState; });
        const { baz } = state;
        return ();
    }""")

    def test_ng_on_init_inlined(self):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent {
        baz!: number;
        ngOnInit() {
            this.baz = 27;
        }
    }
    """
        assert_code(transform_code(source), """
    import React from 'react';
    export function FooBarComponent() {
        const [state, setState] = React.useState(()=>{
            const initialState = { baz: undefined as number };
            /* inlined ngOnInit */
            { initialState.baz = 27; }
            return initialState; });
        const { baz } = state;
        return ();
    }""")

    def test_state_read_in_initializer(self):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent {
        a = 1;
        b!: number;
        constructor() {
            this.b = this.a * 2;
        }
    }
    """
        assert "initialState.b = initialState.a * 2;" in transform_code(source)

    def test_assignment_becomes_set_state(self):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent {
        baz = 17;
        foo() {
            this.baz = 27;
        }
    }
    """
        assert_code(transform_code(source), """
    import React from 'react';
    export function FooBarComponent() {
        const [state, setState] = React.useState(()=>{
            const initialState = { baz: 17 };
            return initialState;
        });
        const { baz } = state;
        function foo() {
            setState({...state, baz: 27});
        }
        return ();
    }""")

    def test_member_reads_lose_this(self):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent {
        count = 0;
        increment() {
            this.count = this.count + 1;
        }
    }
    """
        assert "setState({...state, count: count + 1});" in transform_code(source)

    def test_ng_on_init_without_state(self, caplog):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent {
        ngOnInit() {
            console.log('init');
        }
    }
    """
        with caplog.at_level(logging.WARNING):
            result = transform_code(source)
        assert "function ngOnInit() {" in result
        assert "ngOnInit kept as a plain function" in caplog.text

    def test_constructor_body_without_state(self, caplog):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent {
        constructor() {
            console.log('created');
        }
    }
    """
        with caplog.at_level(logging.WARNING):
            result = transform_code(source)
        assert "created" not in result
        assert "constructor body dropped" in caplog.text


# =========================================================================
# Tests: Methods and accessors
# =========================================================================

class TestMethods:
    def test_async_method(self):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent {
        async load() {
            await fetch('x');
        }
    }
    """
        assert "async function load() { await fetch('x'); }" in normalize(transform_code(source))

    def test_type_assertion(self):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent {
        readonly bar = 1;
        foo() {
            return <number>this.bar;
        }
    }
    """
        assert_code(transform_code(source), """
    import React from 'react';
    export function FooBarComponent() {
        const bar = 1;
        function foo() {
            return ((bar) as number);
        }
        return ();
    }""")

    def test_input_setter_is_inlined(self):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent {
        @Input() set size(v: number) {
            console.log(v);
        }
    }
    """
        result = normalize(transform_code(source))
        assert "function FooBarComponent({ size }: { size: number })" in result
        assert "/* inlined setter for size */ { console.log(v); } /* inlined setter end */" in result

    @pytest.mark.parametrize(
        "setter_decorator, getter_decorator",
        [("@Input() ", ""), ("", "@Input() ")],
    )
    def test_input_accessor_pair_is_one_prop(self, setter_decorator, getter_decorator):
        source = f"""
    @Component({{selector: 'foo-bar'}})
    export class FooBarComponent {{
        private _v = 0;
        {setter_decorator}set v(x: number) {{
            console.log(x);
        }}
        {getter_decorator}get v() {{
            return this._v;
        }}
    }}
    """
        result = normalize(transform_code(source))
        assert "function FooBarComponent({ v }: { v: number })" in result
        assert "/* inlined setter for v */ { console.log(x); } /* inlined setter end */" in result
        assert "const v" not in result
        assert "function set_v" not in result

    def test_members_start_on_their_own_line(self):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent { n = 0; go() { return 1; } }
    """
        assert "const { n } = state;\n\tfunction go() { return 1; }" in transform_code(source)

    def test_plain_setter(self):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent {
        set size(v: number) {
            console.log(v);
        }
    }
    """
        assert "function set_size(v: number) { console.log(v); }" in normalize(transform_code(source))


# =========================================================================
# Tests: Constructor injection
# =========================================================================

class TestInjection:
    def test_injections(self, caplog):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent {
        constructor(private heroService: HeroService, private el: ElementRef) { }
    }
    """
        with caplog.at_level(logging.WARNING):
            result = transform_code(source)
        assert_code(result, """
    import React from 'react';
    export function FooBarComponent() {
        const heroService = React.useContext(HeroService);
        const el = React.createRef();
        return ();
    }""")
        assert "No configuration for injection type 'HeroService'" in caplog.text

    def test_untyped_injection(self):
        source = """
    @Component({selector: 'foo-bar'})
    export class FooBarComponent {
        constructor(service) { }
    }
    """
        with pytest.raises(ConfigurationError):
            transform_code(source)


# =========================================================================
# Tests: Templates and imports
# =========================================================================

class TestTemplatesAndImports:
    def test_inline_template(self):
        source = """
    @Component({selector: 'foo-bar', template: '<div>{{name}}</div>'})
    export class FooBarComponent {
        @Input() name: string;
    }
    """
        assert_code(transform_code(source), """
    import React from 'react';
    export function FooBarComponent({ name }: { name: string }) {
        return (<div>{name}</div>);
    }""")

    def test_template_url_and_styles(self):
        source = """
    @Component({
        selector: 'foo-bar',
        templateUrl: './foo.component.html',
        styleUrls: ['./foo.component.css'],
    })
    export class FooBarComponent { }
    """
        templates = {"./foo.component.html": "<p>{{ 1 + 1 }}</p>"}
        assert_code(transform_code(source, templates=templates), """
    import React from 'react';
    import './foo.component.css';
    export function FooBarComponent() {
        return (<p>{1 + 1}</p>);
    }""")

    def test_missing_template_file(self):
        source = """
    @Component({selector: 'foo-bar', templateUrl: './missing.html'})
    export class FooBarComponent { }
    """

        def loader(path):
            raise FileNotFoundError(path)

        project_info = ProjectInfo(template_loader=loader)
        with pytest.raises(ConfigurationError):
            transform_component_file(source, "foo.ts", project_info)

    def test_referenced_component_and_pipe_imports(self):
        source = """
    @Component({selector: 'foo-bar', template: '<app-hero [name]="title | uppercase"></app-hero>'})
    export class FooBarComponent { }
    """
        hero = ComponentRecord("app-hero", "HeroComponent", "hero/hero.component.ts")
        assert_code(transform_code(source, component_map={"app-hero": hero}), """
    import React from 'react';
    import {HeroComponent} from './hero/hero.component';
    import {uppercase} from './pipes';
    export function FooBarComponent() {
        return (<HeroComponent name={uppercase(title)} />);
    }""")

    def test_angular_imports_removed(self):
        source = """import { Component } from '@angular/core';
import { SomethingUseful } from './baz';

@Component({selector: 'foo-bar'})
export class FooBarComponent { }
"""
        assert_code(transform_code(source), """
    import React from 'react';
    import { SomethingUseful } from './baz';
    export function FooBarComponent() {
        return ();
    }""")

    def test_file_without_components_is_unchanged(self):
        source = """
    import { Foo } from '@angular/bar';
    import { SomethingUseful } from '.baz';
    """
        assert transform_code(source) == source

    def test_code_outside_components_is_kept(self):
        source = """
    const LIMIT = 10;

    @Component({selector: 'foo-bar'})
    export class FooBarComponent { }

    export function helper() { return LIMIT; }
    """
        result = normalize(transform_code(source))
        assert result.startswith("import React from 'react'; const LIMIT = 10;")
        assert result.endswith("export function helper() { return LIMIT; }")
