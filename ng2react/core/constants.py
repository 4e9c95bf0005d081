"""Static naming tables shared by the template compiler.

Built once at import time and never mutated: lookups are frozensets and
read-only mappings.
"""

from types import MappingProxyType
from typing import Mapping

# =============================================================================
# Events
# =============================================================================

# Angular event names are lower case ("keydown"); React uses "on" plus the
# spelling below ("onKeyDown").
_EVENT_NAMES = (
    "Copy",
    "Cut",
    "Paste",
    "CompositionEnd",
    "CompositionStart",
    "CompositionUpdate",
    "KeyDown",
    "KeyPress",
    "KeyUp",
    "Focus",
    "Blur",
    "Change",
    "Input",
    "Invalid",
    "Reset",
    "Submit",
    "Error",
    "Load",
    "Click",
    "ContextMenu",
    "DoubleClick",
    "Drag",
    "DragEnd",
    "DragEnter",
    "DragExit",
    "DragLeave",
    "DragOver",
    "DragStart",
    "Drop",
    "MouseDown",
    "MouseEnter",
    "MouseLeave",
    "MouseMove",
    "MouseOut",
    "MouseOver",
    "MouseUp",
    "PointerDown",
    "PointerMove",
    "PointerUp",
    "PointerCancel",
    "GotPointerCapture",
    "LostPointerCapture",
    "PointerEnter",
    "PointerLeave",
    "PointerOver",
    "PointerOut",
    "Select",
    "TouchCancel",
    "TouchEnd",
    "TouchMove",
    "TouchStart",
    "Scroll",
    "Wheel",
    "Abort",
    "CanPlay",
    "CanPlayThrough",
    "DurationChange",
    "Emptied",
    "Encrypted",
    "Ended",
    "Error",
    "LoadedData",
    "LoadedMetadata",
    "LoadStart",
    "Pause",
    "Play",
    "Playing",
    "Progress",
    "RateChange",
    "Seeked",
    "Seeking",
    "Stalled",
    "Suspend",
    "TimeUpdate",
    "VolumeChange",
    "Waiting",
    "Load",
    "Error",
    "AnimationStart",
    "AnimationEnd",
    "AnimationIteration",
    "TransitionEnd",
    "Toggle",
)

EVENT_NAME_MAP: Mapping[str, str] = MappingProxyType(
    {name.lower(): "on" + name for name in _EVENT_NAMES}
)

# =============================================================================
# Elements
# =============================================================================

VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})

# Contents are not tokenized as markup.
RAW_TEXT_ELEMENTS = frozenset({"script", "style", "textarea", "title"})

# Elements whose end tag may be omitted when the parent closes.
CLOSED_BY_PARENT = frozenset({
    "li", "dt", "dd", "rb", "rt", "rtc", "rp", "optgroup", "option", "p",
    "thead", "tbody", "tfoot", "tr", "td", "th",
})

_P_CLOSERS = frozenset({
    "address", "article", "aside", "blockquote", "div", "dl", "fieldset",
    "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6", "header", "hgroup",
    "hr", "main", "nav", "ol", "p", "pre", "section", "table", "ul",
})

# Open element -> child tags that implicitly close it.
CLOSED_BY_CHILDREN: Mapping[str, frozenset] = MappingProxyType({
    "li": frozenset({"li"}),
    "dt": frozenset({"dt", "dd"}),
    "dd": frozenset({"dt", "dd"}),
    "rb": frozenset({"rb", "rt", "rtc", "rp"}),
    "rt": frozenset({"rb", "rt", "rtc", "rp"}),
    "rtc": frozenset({"rb", "rtc", "rp"}),
    "rp": frozenset({"rb", "rt", "rtc", "rp"}),
    "optgroup": frozenset({"optgroup"}),
    "option": frozenset({"option", "optgroup"}),
    "p": _P_CLOSERS,
    "thead": frozenset({"tbody", "tfoot"}),
    "tbody": frozenset({"tbody", "tfoot"}),
    "tfoot": frozenset({"tbody"}),
    "tr": frozenset({"tr"}),
    "td": frozenset({"td", "th"}),
    "th": frozenset({"td", "th"}),
})

# Elements that open a foreign (namespaced) subtree.
FOREIGN_NAMESPACES: Mapping[str, str] = MappingProxyType({"svg": "svg"})

# =============================================================================
# Attributes
# =============================================================================

# "class" -> "className" is special-cased by the generator.
ATTRIBUTE_DOM_ALIASES: Mapping[str, str] = MappingProxyType({"for": "htmlFor"})

# DOM spellings whose case differs from the lower-case HTML attribute.
_CAMEL_CASE_ATTRIBUTES = (
    "acceptCharset",
    "accessKey",
    "allowFullScreen",
    "autoComplete",
    "autoFocus",
    "autoPlay",
    "cellPadding",
    "cellSpacing",
    "charSet",
    "classID",
    "className",
    "colSpan",
    "contentEditable",
    "contextMenu",
    "controlsList",
    "crossOrigin",
    "dateTime",
    "encType",
    "formAction",
    "formEncType",
    "formMethod",
    "formNoValidate",
    "formTarget",
    "frameBorder",
    "hrefLang",
    "htmlFor",
    "httpEquiv",
    "inputMode",
    "keyParams",
    "keyType",
    "marginHeight",
    "marginWidth",
    "maxLength",
    "mediaGroup",
    "minLength",
    "noValidate",
    "radioGroup",
    "readOnly",
    "rowSpan",
    "spellCheck",
    "srcDoc",
    "srcLang",
    "srcSet",
    "tabIndex",
    "useMap",
    "accentHeight",
    "alignmentBaseline",
    "allowReorder",
    "arabicForm",
    "attributeName",
    "attributeType",
    "autoReverse",
    "baseFrequency",
    "baseProfile",
    "baselineShift",
    "calcMode",
    "capHeight",
    "clipPath",
    "clipPathUnits",
    "clipRule",
    "colorInterpolation",
    "colorInterpolationFilters",
    "colorProfile",
    "colorRendering",
    "contentScriptType",
    "contentStyleType",
    "diffuseConstant",
    "dominantBaseline",
    "edgeMode",
    "enableBackground",
    "externalResourcesRequired",
    "fillOpacity",
    "fillRule",
    "filterRes",
    "filterUnits",
    "floodColor",
    "floodOpacity",
    "fontFamily",
    "fontSize",
    "fontSizeAdjust",
    "fontStretch",
    "fontStyle",
    "fontVariant",
    "fontWeight",
    "glyphName",
    "glyphOrientationHorizontal",
    "glyphOrientationVertical",
    "glyphRef",
    "gradientTransform",
    "gradientUnits",
    "horizAdvX",
    "horizOriginX",
    "imageRendering",
    "kernelMatrix",
    "kernelUnitLength",
    "keyPoints",
    "keySplines",
    "keyTimes",
    "lengthAdjust",
    "letterSpacing",
    "lightingColor",
    "limitingConeAngle",
    "markerEnd",
    "markerHeight",
    "markerMid",
    "markerStart",
    "markerUnits",
    "markerWidth",
    "maskContentUnits",
    "maskUnits",
    "numOctaves",
    "overlinePosition",
    "overlineThickness",
    "paintOrder",
    "pathLength",
    "patternContentUnits",
    "patternTransform",
    "patternUnits",
    "pointerEvents",
    "pointsAtX",
    "pointsAtY",
    "pointsAtZ",
    "preserveAlpha",
    "preserveAspectRatio",
    "primitiveUnits",
    "refX",
    "refY",
    "renderingIntent",
    "repeatCount",
    "repeatDur",
    "requiredExtensions",
    "requiredFeatures",
    "shapeRendering",
    "specularConstant",
    "specularExponent",
    "spreadMethod",
    "startOffset",
    "stdDeviation",
    "stitchTiles",
    "stopColor",
    "stopOpacity",
    "strikethroughPosition",
    "strikethroughThickness",
    "strokeDasharray",
    "strokeDashoffset",
    "strokeLinecap",
    "strokeLinejoin",
    "strokeMiterlimit",
    "strokeOpacity",
    "strokeWidth",
    "surfaceScale",
    "systemLanguage",
    "tableValues",
    "targetX",
    "targetY",
    "textAnchor",
    "textDecoration",
    "textLength",
    "textRendering",
    "underlinePosition",
    "underlineThickness",
    "unicodeBidi",
    "unicodeRange",
    "unitsPerEm",
    "vAlphabetic",
    "vHanging",
    "vIdeographic",
    "vMathematical",
    "vectorEffect",
    "vertAdvY",
    "vertOriginX",
    "vertOriginY",
    "viewBox",
    "viewTarget",
    "wordSpacing",
    "writingMode",
    "xChannelSelector",
    "xHeight",
    "xlinkActuate",
    "xlinkArcrole",
    "xlinkHref",
    "xlinkRole",
    "xlinkShow",
    "xlinkTitle",
    "xlinkType",
    "xmlnsXlink",
    "xmlBase",
    "xmlLang",
    "xmlSpace",
    "yChannelSelector",
    "zoomAndPan",
)

# Keyed by the lower-case spelling.
CASE_MAP: Mapping[str, str] = MappingProxyType(
    {name.lower(): name for name in _CAMEL_CASE_ATTRIBUTES}
)

# Literal values of these attributes are emitted as expressions, not strings.
NON_STRING_ATTRIBUTES = frozenset({"size", "colSpan", "tabIndex", "minLength", "maxLength"})

# =============================================================================
# Source framework
# =============================================================================

# Imports from these module prefixes are dropped from component files.
SOURCE_FRAMEWORK_MODULES = ("@angular",)

COMPONENT_DECORATOR = "Component"
INPUT_DECORATOR = "Input"
OUTPUT_DECORATOR = "Output"

INIT_HOOK = "ngOnInit"
DESTROY_HOOK = "ngOnDestroy"

# =============================================================================
# Project walking
# =============================================================================

SKIP_DIRECTORIES = frozenset({
    "node_modules",
    "dist",
    "coverage",
    "__pycache__",
})

# Templates of transformed components are inlined into the TSX output.
COMPONENT_TEMPLATE_SUFFIX = ".component.html"
