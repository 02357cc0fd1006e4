"""
Constants and default tables for Duktape bindings generation
"""


# Types pushed and read as JavaScript numbers
NUMBER_TYPES = [
    "int",
    "unsigned",
    "unsigned short",
    "u32",
    "u16",
    "uint",
    "double",
    "float",
    "AttributeChange::Type",
    "ClientLoginState",
    "entity_id_t",
    "component_id_t",
]

# Namespace-qualified names that keep their qualification after normalization
SCOPED_TYPE_PREFIXES = ["AttributeChange"]

# Element names in container typedefs that refer to an interface class
TEMPLATE_SUBSTITUTIONS = {
    "Component": "IComponent",
    "Asset": "IAsset",
    "AssetTransfer": "IAssetTransfer",
    "AssetStorage": "IAssetStorage",
    "AssetBundle": "IAssetBundle",
}

# Raw type patterns that are never scriptable: (pattern, match mode)
BAD_TYPE_PATTERNS = [
    ("bool *", "contains"),
    ("float *", "endswith"),
    ("float3 *", "endswith"),
    ("vec *", "endswith"),
    ("std::", "contains"),
    ("char*", "contains"),
    ("char *", "contains"),
    ("[", "contains"),
]

# Framework base classes owned by reference count
REFCOUNTED_BASE_TYPES = [
    "Entity",
    "IComponent",
    "IAsset",
    "IAssetTransfer",
    "IAssetStorage",
    "JavaScriptInstance",
]

# Class name fragments implying reference-counted ownership
REFCOUNTED_NAME_FRAGMENTS = ["JavaScriptInstance", "AssetTransfer", "AssetStorage"]

# Child members or macro invocations marking a reference-counted class
REFCOUNTED_MARKERS = ["URHO3D_OBJECT", "COMPONENT_NAME", "ParentEntity", "DiskSource"]

# Namespaces whose classes are never bound
BAD_NAMESPACES = ["Urho3D", "Ogre", "Tundra::Ogre"]

# Classes whose header lives elsewhere; a value ending in ".h" is used verbatim
HEADER_ALIASES = {
    "AssetReferenceList": "AssetReference",
    "RayQueryResult": "IRenderer.h",
}

# Includes used for a dependency when the header index has no match
FALLBACK_INCLUDES = {
    "Entity": "Entity.h",
}

# Members known not to link, as "Class::member" and the parameter types
# that select one overload, or None for every overload
EXCLUDED_MEMBERS = [
    ("float4::Orthogonalize", None),
    ("Plane::Distance", ("float4",)),
]

# Classes whose variables are never exposed as properties
SKIP_PROPERTY_CLASSES = ["Frustum"]

# Typedefs that must be qualified when declared in generated code
RETURN_TYPE_QUALIFICATIONS = {
    "EntityMap": "Scene::EntityMap",
    "ComponentVector": "Entity::ComponentVector",
    "ComponentMap": "Entity::ComponentMap",
}

# Macro tokens removed from function return types
IGNORED_TYPE_TOKENS = ["CONST_WIN32", "MUST_USE_RESULT"]

# Namespace that is always brought into scope
FRAMEWORK_NAMESPACE = "Tundra"

# Headers every generated unit includes first
RUNTIME_INCLUDES = [
    "StableHeaders.h",
    "CoreTypes.h",
    "JavaScriptInstance.h",
    "LoggingFunctions.h",
]

FILE_BANNER = [
    "// For conditions of distribution and use, see copyright notice in LICENSE",
    "// This file has been autogenerated with BindingsGenerator",
]

BINDINGS_NAMESPACE = "JSBindings"

DUK_SIGNATURE = "(duk_context* ctx)"

INDENT = "    "

OUTPUT_SUFFIX = "Bindings.cpp"
