"""
Code generation functions for Duktape bindings
"""

from dataclasses import dataclass, field

from . import logger
from .constants import (
    BINDINGS_NAMESPACE,
    DUK_SIGNATURE,
    FILE_BANNER,
    FRAMEWORK_NAMESPACE,
    INDENT,
    RUNTIME_INCLUDES,
)
from .marshalling import Marshaller, class_id, finalizer_name
from .overloads import Overload, OverloadResolver, OverloadSet, Property, lower_first
from .selector import ClassRegistry, MemberSelector
from .symbols import Parameter, Symbol, Visibility
from .type_mapper import TypeCategory, TypeMapper, extract_namespace

RESERVED_NAMES = ("ctx", "numArgs", "thisObj", "ret", "newObj", "wrapper")


def indent(level: int = 1) -> str:
    return INDENT * level


def function_header(name: str) -> str:
    return f"static duk_ret_t {name}{DUK_SIGNATURE}"


def remove_arg_macros(signal_type: str) -> str:
    """Remove ARG(name) annotations from a signal type"""
    while True:
        start = signal_type.find("ARG(")
        if start == -1:
            return signal_type
        end = signal_type.find(")", start)
        if end == -1:
            return signal_type
        signal_type = signal_type[:start] + signal_type[end + 1:]


def split_template_arguments(type_text: str) -> list[str]:
    """Top-level template arguments of type_text"""
    start = type_text.find("<")
    end = type_text.rfind(">")
    if start == -1 or end <= start:
        return []
    arguments, depth, current = [], 0, ""
    for char in type_text[start + 1:end]:
        if char == "," and depth == 0:
            arguments.append(current)
            current = ""
            continue
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
        current += char
    arguments.append(current)
    arguments = [" ".join(a.split()).replace("< ", "<").replace(" >", ">") for a in arguments]
    if arguments == ["void"] or arguments == [""]:
        return []
    return arguments


def parameter_variable(param: Parameter, index: int) -> str:
    name = param.name or f"param{index}"
    return name + "_" if name in RESERVED_NAMES else name


@dataclass
class ClassContext:
    """Per-class emission state"""
    symbol: Symbol
    class_name: str
    namespace: str
    refcounted: bool
    dependencies: dict[str, None] = field(default_factory=dict)
    finalizer_dependencies: dict[str, None] = field(default_factory=dict)
    emitted_finalizers: set[str] = field(default_factory=set)
    properties: list[Property] = field(default_factory=list)


class CodeGenerator:
    """Generates Duktape C++ glue from symbol graph classes"""

    def __init__(self, registry: ClassRegistry, type_mapper: TypeMapper | None = None):
        self.registry = registry
        self.type_mapper = type_mapper or TypeMapper.for_registry(registry)
        self.members = MemberSelector(registry, self.type_mapper)
        self.resolver = OverloadResolver(self.members, self.type_mapper)
        self.marshaller = Marshaller(self.type_mapper)

    def create_context(self, class_symbol: Symbol) -> ClassContext:
        class_name = self.members.class_name(class_symbol)
        return ClassContext(
            symbol=class_symbol,
            class_name=class_name,
            namespace=extract_namespace(class_symbol.name),
            refcounted=self.registry.is_refcounted(class_name),
        )

    def generate_class(self, class_symbol: Symbol) -> str:
        """Generate the complete bindings unit for one class"""
        context = self.create_context(class_symbol)
        self.find_dependencies(context)

        declarations = self.generate_declarations(context)
        body = []
        if not context.refcounted and class_symbol.kind != "namespace":
            body.append(self.generate_finalizer(context, context.class_name))
        body.append(self.generate_property_accessors(context))

        instance_sets = self.resolver.resolve(class_symbol, static=False)
        static_sets = self.resolver.resolve(class_symbol, static=True)
        for sets in (instance_sets, static_sets):
            body.extend(self.generate_function(context, o) for s in sets.values() for o in s.overloads)
            body.extend(self.generate_selector(s) for s in sets.values() if s.needs_selector)
        body.append(self.generate_function_list(context, instance_sets, static=False))
        body.append(self.generate_function_list(context, static_sets, static=True))
        body.append(self.generate_expose_function(context, instance_sets, static_sets))

        return OutputBuilder.build(
            includes=self.generate_includes(context),
            namespaces=self.generate_using_namespaces(context),
            declarations=declarations,
            body=body,
        )

    def find_dependencies(self, context: ClassContext):
        """Collect registered classes referenced by the bound members"""
        for child in context.symbol.children:
            if not self.members.is_scriptable(child):
                continue
            if self.members.is_candidate_function(child):
                self._add_dependency(context, child.type, True)
                for param in child.parameters:
                    self._add_dependency(context, param.basic_type(), False)
            elif self.members.is_property_variable(child):
                self._add_dependency(context, child.type, True)
            elif self.members.is_signal(child) and child.visibility == Visibility.PUBLIC:
                for param_type in split_template_arguments(remove_arg_macros(child.type)):
                    self._add_dependency(context, param_type, True)

    def _add_dependency(self, context: ClassContext, type_text: str, is_return_value: bool):
        name = self.type_mapper.classify(type_text).class_name
        if not name or name == context.class_name:
            return
        context.dependencies[name] = None
        # Values pushed back to script need the finalizer of their class
        if is_return_value and not self.registry.is_refcounted(name):
            context.finalizer_dependencies[name] = None

    def generate_includes(self, context: ClassContext) -> tuple[list[str], list[str]]:
        own = self.registry.include_for(context.class_name)
        seen = {own}
        dependency_includes = []
        for name in context.dependencies:
            include = self.registry.include_for(name)
            if include and include not in seen:
                seen.add(include)
                dependency_includes.append(include)
        return [own] if own else [], dependency_includes

    @staticmethod
    def generate_using_namespaces(context: ClassContext) -> list[str]:
        lines = []
        if context.namespace:
            lines.append(f"using namespace {context.namespace};")
            if context.namespace != FRAMEWORK_NAMESPACE:
                lines.append(f"using namespace {FRAMEWORK_NAMESPACE};")
        lines.append("using namespace std;")
        return lines

    def generate_declarations(self, context: ClassContext) -> list[str]:
        """Type ids and finalizers of dependencies, then the class's own id"""
        ids = [f'static const char* {class_id(name)} = "{name}";'
               for name in context.dependencies if not self.registry.is_refcounted(name)]
        finalizers = [self.generate_finalizer(context, name) for name in context.finalizer_dependencies]
        own_id = f'static const char* {class_id(context.class_name)} = "{context.class_name}";'
        return [_block(ids), "".join(finalizers), _block([own_id])]

    @staticmethod
    def generate_finalizer(context: ClassContext, type_name: str) -> str:
        if type_name in context.emitted_finalizers:
            return ""
        context.emitted_finalizers.add(type_name)
        return _block([
            function_header(finalizer_name(type_name)),
            "{",
            indent() + f"FinalizeValueObject<{type_name}>(ctx, {class_id(type_name)});",
            indent() + "return 0;",
            "}",
            "",
        ])

    def generate_property_accessors(self, context: ClassContext) -> str:
        if not self.members.exposes_properties(context.symbol):
            return ""
        code = []
        for child in context.symbol.children:
            if self.members.is_signal(child):
                # Signal owners are framework objects held through WeakPtr<Object>
                if context.refcounted and child.visibility == Visibility.PUBLIC and not child.is_static:
                    code.append(self.generate_signal(context, child))
            elif self.members.is_candidate_variable(child):
                reason = self.members.variable_rejection(child)
                if reason:
                    logger.info(f"{child.name} in class {context.symbol.name} {reason}")
                else:
                    code.append(self.generate_variable_property(context, child))
        return "".join(code)

    def generate_variable_property(self, context: ClassContext, member: Symbol) -> str:
        class_name = context.class_name
        name = lower_first(member.name)
        info = self.type_mapper.classify(member.type)
        getter = f"{class_name}_Get_{name}"
        setter = ""
        lines = []

        if not member.is_const_qualified() and info.category != TypeCategory.MAP:
            setter = f"{class_name}_Set_{name}"
            lines += [
                function_header(setter),
                "{",
                indent() + self.marshaller.get_this(class_name),
                indent() + self.marshaller.get_from_stack(member.type, 0, member.name),
                indent() + f"thisObj->{member.name} = {member.name};",
                indent() + "return 0;",
                "}",
                "",
            ]

        prefix = ""
        if info.category == TypeCategory.VALUE_OBJECT:
            # Pushed by address into the owning object
            address = "" if info.descriptor.is_pointer else "&"
            push = (f"PushValueObject<{info.name}>(ctx, {address}thisObj->{member.name}, "
                    f"{class_id(info.name)}, nullptr, true);")
        else:
            if info.category == TypeCategory.VECTOR and info.element_category == TypeCategory.VALUE_OBJECT:
                prefix = self.generate_finalizer(context, info.element)
            push = self.marshaller.push(member.type, f"thisObj->{member.name}")

        lines += [
            function_header(getter),
            "{",
            indent() + self.marshaller.get_this(class_name),
            indent() + push,
            indent() + "return 1;",
            "}",
            "",
        ]
        context.properties.append(Property(name, getter, setter))
        return prefix + _block(lines)

    def _signal_parameters(self, signal_type: str) -> list[str] | None:
        parameters = split_template_arguments(signal_type)
        for param in parameters:
            category = self.type_mapper.classify(param).category
            if category in (TypeCategory.UNSUPPORTED, TypeCategory.VOID, TypeCategory.MAP):
                return None
        return parameters

    def generate_signal(self, context: ClassContext, member: Symbol) -> str:
        """Wrapper, receiver and accessor functions exposing a signal member"""
        class_name = context.class_name
        signal_type = " ".join(remove_arg_macros(member.type).split())
        parameters = self._signal_parameters(signal_type)
        if parameters is None:
            logger.info(f"{member.name} in class {context.symbol.name} unsupported signal parameters")
            return ""

        wrapper = f"SignalWrapper_{class_name}_{member.name}"
        receiver = f"SignalReceiver_{class_name}_{member.name}"
        wrapper_id = class_id(wrapper)
        get_wrapper = indent() + f"{wrapper}* wrapper = GetThisValueObject<{wrapper}>(ctx, {wrapper_id});"
        owner_check = indent() + "if (!wrapper->owner_) return 0;"

        signature = ", ".join(f"{p} param{i}" for i, p in enumerate(parameters))
        lines = [
            f'static const char* {wrapper_id} = "{wrapper}";',
            "",
            f"class {wrapper}",
            "{",
            "public:",
            indent() + f"{wrapper}(Object* owner, {signal_type}* signal) :",
            indent(2) + "owner_(owner),",
            indent(2) + "signal_(signal)",
            indent() + "{",
            indent() + "}",
            "",
            indent() + "WeakPtr<Object> owner_;",
            indent() + f"{signal_type}* signal_;",
            "};",
            "",
            f"class {receiver} : public SignalReceiver",
            "{",
            "public:",
            indent() + f"void OnSignal({signature})",
            indent() + "{",
            indent(2) + "duk_context* ctx = ctx_;",
            indent(2) + "duk_push_global_object(ctx);",
            indent(2) + 'duk_get_prop_string(ctx, -1, "_OnSignal");',
            indent(2) + "duk_remove(ctx, -2);",
            indent(2) + "duk_push_number(ctx, (size_t)key_);",
            indent(2) + "duk_push_array(ctx);",
        ]
        for i, param in enumerate(parameters):
            lines.append(indent(2) + self.marshaller.push(param, f"param{i}"))
            lines.append(indent(2) + f"duk_put_prop_index(ctx, -2, {i});")
        lines += [
            indent(2) + "bool success = duk_pcall(ctx, 2) == 0;",
            indent(2) + 'if (!success) LogError("[JavaScript] OnSignal: " + String(duk_safe_to_string(ctx, -1)));',
            indent(2) + "duk_pop(ctx);",
            indent() + "}",
            "};",
            "",
        ]
        code = _block(lines) + self.generate_finalizer(context, wrapper)

        lines = [
            function_header(f"{wrapper}_Connect"),
            "{",
            get_wrapper,
            owner_check,
            indent() + "HashMap<void*, SharedPtr<SignalReceiver> >& signalReceivers = "
                       "JavaScriptInstance::InstanceFromContext(ctx)->SignalReceivers();",
            indent() + "if (signalReceivers.Find(wrapper->signal_) == signalReceivers.End())",
            indent() + "{",
            indent(2) + f"{receiver}* receiver = new {receiver}();",
            indent(2) + "receiver->ctx_ = ctx;",
            indent(2) + "receiver->key_ = wrapper->signal_;",
            indent(2) + f"wrapper->signal_->Connect(receiver, &{receiver}::OnSignal);",
            indent(2) + "signalReceivers[wrapper->signal_] = receiver;",
            indent() + "}",
            indent() + "CallConnectSignal(ctx, wrapper->signal_);",
            indent() + "return 0;",
            "}",
            "",
            function_header(f"{wrapper}_Disconnect"),
            "{",
            get_wrapper,
            owner_check,
            indent() + "CallDisconnectSignal(ctx, wrapper->signal_);",
            indent() + "return 0;",
            "}",
            "",
            function_header(f"{wrapper}_Emit"),
            "{",
            get_wrapper,
            owner_check,
        ]
        for i, param in enumerate(parameters):
            lines.append(indent() + self.marshaller.get_from_stack(param, i, f"param{i}"))
        arguments = ", ".join(f"param{i}" for i in range(len(parameters)))
        getter = f"{class_name}_Get_{member.name}"
        lines += [
            indent() + f"wrapper->signal_->Emit({arguments});",
            indent() + "return 0;",
            "}",
            "",
            function_header(getter),
            "{",
            indent() + self.marshaller.get_this(class_name),
            indent() + f"{wrapper}* wrapper = new {wrapper}(thisObj, &thisObj->{member.name});",
            indent() + f"PushValueObject(ctx, wrapper, {wrapper_id}, {finalizer_name(wrapper)}, false);",
            indent() + f"duk_push_c_function(ctx, {wrapper}_Connect, DUK_VARARGS);",
            indent() + 'duk_put_prop_string(ctx, -2, "Connect");',
            indent() + f"duk_push_c_function(ctx, {wrapper}_Disconnect, DUK_VARARGS);",
            indent() + 'duk_put_prop_string(ctx, -2, "Disconnect");',
            indent() + f"duk_push_c_function(ctx, {wrapper}_Emit, {len(parameters)});",
            indent() + 'duk_put_prop_string(ctx, -2, "Emit");',
            indent() + "return 1;",
            "}",
            "",
        ]
        context.properties.append(Property(member.name, getter))
        return code + _block(lines)

    def _read_arguments(self, overload: Overload) -> tuple[list[str], str]:
        lines = []
        names = []
        for i, param in enumerate(overload.parameters):
            var = parameter_variable(param, i)
            type_text = param.basic_type_retain_reference()
            if param.has_default:
                lines.append(indent() + self.marshaller.get_from_stack_default(type_text, i, var, param.default_value))
            else:
                lines.append(indent() + self.marshaller.get_from_stack(type_text, i, var))
            names.append(var)
        return lines, ", ".join(names)

    def generate_function(self, context: ClassContext, overload: Overload) -> str:
        """Thunk reading the arguments, calling the native function and pushing its result"""
        class_name = context.class_name
        function = overload.function
        lines = [function_header(overload.function_name), "{"]
        if overload.has_default_parameters:
            lines.append(indent() + "int numArgs = duk_get_top(ctx);")

        if overload.is_constructor:
            reads, arguments = self._read_arguments(overload)
            lines += reads
            lines += [
                indent() + f"{class_name}* newObj = new {class_name}({arguments});",
                indent() + self.marshaller.push_constructor_result(class_name, "newObj"),
                indent() + "return 0;",
            ]
        else:
            if overload.is_static:
                call_prefix = f"{class_name}::"
            else:
                call_prefix = "thisObj->"
                lines.append(indent() + self.marshaller.get_this(class_name))
            reads, arguments = self._read_arguments(overload)
            lines += reads
            call = f"{call_prefix}{function.name}({arguments})"
            if self.type_mapper.classify(function.type).category == TypeCategory.VOID:
                lines += [indent() + f"{call};", indent() + "return 0;"]
            else:
                lines += [
                    indent() + f"{self.type_mapper.qualify_declaration(function.type)} ret = {call};",
                    indent() + self.marshaller.push(function.type, "ret"),
                    indent() + "return 1;",
                ]
        lines += ["}", ""]
        return _block(lines)

    def generate_selector(self, overload_set: OverloadSet) -> str:
        """Runtime dispatch over an overload set, most specific candidates first"""
        lines = [
            function_header(overload_set.selector_name),
            "{",
            indent() + "int numArgs = duk_get_top(ctx);",
        ]
        for overload in overload_set.dispatch_order():
            significant = overload.num_significant_parameters
            operator = ">=" if overload.has_default_parameters else "=="
            test = f"if (numArgs {operator} {significant}"
            for i, param in enumerate(overload.parameters[:significant]):
                check = self.marshaller.arg_check(param.basic_type(), i)
                if check:
                    test += f" && {check}"
            lines.append(indent() + test + ")")
            lines.append(indent(2) + f"return {overload.function_name}(ctx);")
        lines += [
            indent() + 'duk_error(ctx, DUK_ERR_ERROR, "Could not select function overload");',
            "}",
            "",
        ]
        return _block(lines)

    @staticmethod
    def _listed_sets(sets: dict[str, OverloadSet]) -> list[OverloadSet]:
        """Constructors are exposed through the class object itself"""
        return [s for s in sets.values() if not s.is_constructor and s.overloads]

    def generate_function_list(self, context: ClassContext, sets: dict[str, OverloadSet], static: bool) -> str:
        listed = self._listed_sets(sets)
        if not listed:
            return ""
        suffix = "StaticFunctions" if static else "Functions"
        lines = [f"static const duk_function_list_entry {context.class_name}_{suffix}[] = {{"]
        for i, overload_set in enumerate(listed):
            prefix = "," if i else ""
            lines.append(indent() + f'{prefix}{{"{overload_set.script_name}", '
                                    f'{overload_set.entry_point}, {overload_set.entry_arg_count}}}')
        lines += [indent() + ",{nullptr, nullptr, 0}", "};", ""]
        return _block(lines)

    def generate_expose_function(self, context: ClassContext, sets: dict[str, OverloadSet],
                                 static_sets: dict[str, OverloadSet]) -> str:
        """Registration function building the constructor, statics and prototype"""
        class_name = context.class_name
        has_functions = bool(self._listed_sets(sets))
        has_static_functions = bool(self._listed_sets(static_sets))
        lines = [f"void Expose_{class_name}{DUK_SIGNATURE}", "{"]

        constructor = sets.get(f"{class_name}_Ctor")
        if constructor is not None and constructor.overloads:
            lines.append(indent() + f"duk_push_c_function(ctx, {constructor.entry_point}, DUK_VARARGS);")
        else:
            lines.append(indent() + "duk_push_object(ctx);")

        if has_static_functions:
            lines.append(indent() + f"duk_put_function_list(ctx, -1, {class_name}_StaticFunctions);")
        for child in context.symbol.children:
            if child.kind != "enum":
                continue
            for value in child.children:
                lines.append(indent() + f"duk_push_number(ctx, {value.value});")
                lines.append(indent() + f'duk_put_prop_string(ctx, -2, "{value.name}");')

        properties = context.properties + self.resolver.property_accessors(class_name, sets)
        if properties or has_functions:
            lines.append(indent() + "duk_push_object(ctx);")
            if has_functions:
                lines.append(indent() + f"duk_put_function_list(ctx, -1, {class_name}_Functions);")
            for prop in properties:
                setter = prop.setter or "nullptr"
                lines.append(indent() + f'DefineProperty(ctx, "{prop.name}", {prop.getter}, {setter});')
            lines.append(indent() + 'duk_put_prop_string(ctx, -2, "prototype");')

        lines += [
            indent() + f"duk_put_global_string(ctx, {class_id(class_name)});",
            "}",
            "",
        ]
        return _block(lines)


def _block(lines: list[str]) -> str:
    return "".join(line + "\n" for line in lines)


class OutputBuilder:
    """Builds the final bindings unit"""

    @staticmethod
    def build(includes: tuple[list[str], list[str]], namespaces: list[str],
              declarations: list[str], body: list[str]) -> str:
        """
        Assemble a bindings unit.

        Args:
            includes: The class's own header (zero or one) and the dependency headers
            namespaces: using namespace lines
            declarations: Dependency ids, dependency finalizers and the own id
            body: Generated functions in emission order
        """
        own_includes, dependency_includes = includes
        lines = list(FILE_BANNER) + [""]
        lines += [f'#include "{header}"' for header in RUNTIME_INCLUDES + own_includes]
        lines += ["", "#ifdef _MSC_VER", "#pragma warning(disable: 4800)", "#endif", ""]
        lines += [f'#include "{header}"' for header in dependency_includes]
        lines.append("")
        if len(namespaces) > 1:
            lines.append("")
        lines += namespaces
        lines += ["", f"namespace {BINDINGS_NAMESPACE}", "{", ""]

        ids, finalizers, own_id = declarations
        return (_block(lines) + ids + "\n" + finalizers + "\n" + own_id + "\n"
                + "".join(body) + "}\n")
