"""Tests for the member classifier."""

import pytest

from ng2react.core.ast_parser import parse_typescript
from ng2react.core.components import iter_components, scan_component_members


COMPONENT = """
@Component({selector: 'hero-detail'})
export class HeroDetailComponent {
    @Input() hero: Hero;
    @Input() size = 3;
    @Output() deleted = new EventEmitter<Hero>();
    @Output() closed = new EventEmitter();
    readonly title = 'Details';
    editing = false;
    tags = ['a', 'b'];
    selected?: Hero;
    name: string = 'x';

    constructor(private service: HeroService) { }

    ngOnInit() {
        this.editing = true;
    }

    ngOnDestroy() { }

    get label() { return this.hero.name; }

    get upper(): string {
        const n = this.hero.name;
        return n.toUpperCase();
    }

    @Input() set color(value: string) { }

    save() { }
}
"""


def members_of(source: str):
    source_file = parse_typescript(source, "hero.ts")
    component = iter_components(source_file)[0]
    return scan_component_members(component.class_node, source_file.source)


# =========================================================================
# Tests: Classification
# =========================================================================

class TestClassification:
    def test_props(self):
        members = members_of(COMPONENT)
        assert members.prop_names == ["hero", "size", "deleted", "closed", "color"]

    def test_prop_types(self):
        members = members_of(COMPONENT)
        types = {p.name: p.type for p in members.props}
        assert types == {
            "hero": "Hero",
            "size": "number",
            "deleted": "(x: Hero) => void",
            "closed": "unknown",
            "color": "string",
        }

    def test_outputs_have_no_default(self):
        members = members_of(COMPONENT)
        deleted = next(p for p in members.props if p.name == "deleted")
        assert deleted.initializer is None

    def test_state(self):
        members = members_of(COMPONENT)
        assert members.state_names == ["editing", "tags", "selected", "name"]
        types = {s.name: s.type for s in members.state}
        assert types == {
            "editing": "boolean",
            "tags": "string[]",
            "selected": "Hero",
            "name": "string",
        }

    def test_constants(self):
        members = members_of(COMPONENT)
        constants = {c.name: c for c in members.constants}
        assert list(constants) == ["title", "label", "upper"]
        assert constants["label"].getter_inline == "expression"
        assert constants["upper"].getter_inline == "closure"
        assert constants["upper"].type == "string"

    def test_lifecycle_and_constructor(self):
        members = members_of(COMPONENT)
        assert members.ctor is not None
        assert members.ng_on_init is not None
        assert members.ng_on_destroy is not None

    def test_every_member_classified_once(self):
        members = members_of(COMPONENT)
        assert len(members.names) == len(set(members.names))


ACCESSOR_PAIR = """
@Component({{selector: 'x-y'}})
class XComponent {{
    private _v = 0;
    {setter_decorator}set v(x: number) {{ this._v = x; }}
    {getter_decorator}get v() {{ return this._v; }}
}}
"""


class TestInputAccessorPair:
    @pytest.mark.parametrize(
        "setter_decorator, getter_decorator",
        [("@Input() ", ""), ("", "@Input() ")],
    )
    def test_pair_is_one_prop(self, setter_decorator, getter_decorator):
        source = ACCESSOR_PAIR.format(setter_decorator=setter_decorator, getter_decorator=getter_decorator)
        members = members_of(source)
        assert members.prop_names == ["v"]
        assert members.props[0].type == "number"
        assert members.state_names == ["_v"]
        assert members.constants == []
        assert members.input_accessors == {"v"}

    def test_plain_getter_stays_constant(self):
        members = members_of(ACCESSOR_PAIR.format(setter_decorator="", getter_decorator=""))
        assert members.prop_names == []
        assert [c.name for c in members.constants] == ["v"]


# =========================================================================
# Tests: Generated names
# =========================================================================

class TestStateNames:
    def test_default_names(self):
        members = members_of(COMPONENT)
        assert (members.state_name, members.set_state_name) == ("state", "setState")

    def test_names_avoid_members(self):
        source = """
@Component({selector: 'x-y'})
class XComponent {
    state = 1;
    setState() { }
}
"""
        members = members_of(source)
        assert members.state_name == "$state"
        assert members.set_state_name == "$setState"

    def test_double_collision(self):
        source = """
@Component({selector: 'x-y'})
class XComponent {
    state = 1;
    $state = 2;
}
"""
        assert members_of(source).state_name == "$$state"


# =========================================================================
# Tests: Type inference
# =========================================================================

class TestTypeInference:
    def infer(self, initializer: str) -> str:
        source = f"""
@Component({{selector: 'x-y'}})
class XComponent {{
    value = {initializer};
}}
"""
        return members_of(source).state[0].type

    def test_literals(self):
        assert self.infer("1.5") == "number"
        assert self.infer("'a'") == "string"
        assert self.infer("`a`") == "string"
        assert self.infer("true") == "boolean"
        assert self.infer("null") == "null"

    def test_unary(self):
        assert self.infer("-1") == "number"
        assert self.infer("!x") == "boolean"

    def test_arrays(self):
        assert self.infer("[1, 2]") == "number[]"
        assert self.infer("[1, 'a']") == "any[]"

    def test_new_expression(self):
        assert self.infer("new Map<string, number>()") == "Map<string, number>"

    def test_as_expression(self):
        assert self.infer("{} as Settings") == "Settings"

    def test_unknown(self):
        assert self.infer("compute()") == "any"
