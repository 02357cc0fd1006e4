"""
Code snippets moving values between the Duktape value stack and C++
"""

from dataclasses import dataclass

from .type_mapper import TypeCategory, TypeInfo, TypeMapper, UnsupportedTypeError

STRING_CATEGORIES = (TypeCategory.STRING, TypeCategory.STD_STRING)


def class_id(class_name: str) -> str:
    return f"{class_name}_ID"


def finalizer_name(class_name: str) -> str:
    return f"{class_name}_Finalizer"


@dataclass
class StackRead:
    """Declaration and expression reading one argument from the stack"""
    type_name: str
    var: str
    expression: str
    is_reference: bool = False
    is_pointer: bool = False
    direct_init: bool = False

    def statement(self) -> str:
        if self.direct_init:
            return f"{self.type_name} {self.var}({self.expression});"
        return f"{self._declarator(self.is_reference)} = {self.expression};"

    def statement_with_default(self, index: int, default: str) -> str:
        """Read only when the argument was passed; references become values"""
        if self.direct_init:
            fallback = f"{self.type_name}({default})"
            value = f"{self.type_name}({self.expression})"
        else:
            fallback = default
            value = self.expression
        return f"{self._declarator(False)} = numArgs > {index} ? {value} : {fallback};"

    def _declarator(self, reference: bool) -> str:
        if self.is_pointer:
            return f"{self.type_name}* {self.var}"
        if reference:
            return f"{self.type_name}& {self.var}"
        return f"{self.type_name} {self.var}"


class Marshaller:
    """Generates get, push and argument check code for classified types"""

    def __init__(self, type_mapper: TypeMapper):
        self.type_mapper = type_mapper

    def read(self, type_text: str, index: int, var: str) -> StackRead:
        info = self.type_mapper.classify(type_text)
        category = info.category
        name = info.name

        if category == TypeCategory.NUMBER:
            if name == "double":
                expression = f"duk_require_number(ctx, {index})"
            elif "::" in name:
                # Scoped enums do not convert from double directly
                expression = f"({name})(int)duk_require_number(ctx, {index})"
            else:
                expression = f"({name})duk_require_number(ctx, {index})"
            return StackRead(name, var, expression)
        if category == TypeCategory.BOOL:
            return StackRead(name, var, f"duk_require_boolean(ctx, {index})")
        if category in STRING_CATEGORIES:
            return StackRead(name, var, f"duk_require_string(ctx, {index})")
        if category == TypeCategory.VARIANT:
            return StackRead(name, var, f"GetVariant(ctx, {index})")
        if category == TypeCategory.VECTOR:
            return StackRead(name, var, self._read_vector(info, index))
        if category == TypeCategory.SHARED_PTR:
            element = info.element
            return StackRead(f"SharedPtr<{element}>", var, f"GetWeakObject<{element}>(ctx, {index})",
                             direct_init=True)
        if category == TypeCategory.VALUE_OBJECT:
            if info.descriptor.is_pointer:
                return StackRead(name, var, f"GetValueObject<{name}>(ctx, {index}, {class_id(name)})",
                                 is_pointer=True)
            return StackRead(name, var, f"*GetCheckedValueObject<{name}>(ctx, {index}, {class_id(name)})",
                             is_reference=True)
        if category == TypeCategory.WEAK_OBJECT:
            if info.descriptor.is_reference:
                return StackRead(name, var, f"*GetCheckedWeakObject<{name}>(ctx, {index})", is_reference=True)
            return StackRead(name, var, f"GetWeakObject<{name}>(ctx, {index})", is_pointer=True)

        raise UnsupportedTypeError(f"Unsupported type {name} for reading from the stack")

    @staticmethod
    def _read_vector(info: TypeInfo, index: int) -> str:
        element = info.element
        if info.element_category in STRING_CATEGORIES:
            return f"GetStringVector(ctx, {index})"
        if info.element_category == TypeCategory.VALUE_OBJECT:
            return f"GetValueObjectVector<{element}>(ctx, {index}, {class_id(element)})"
        return f"GetWeakObjectVector<{element}>(ctx, {index})"

    def get_from_stack(self, type_text: str, index: int, var: str) -> str:
        return self.read(type_text, index, var).statement()

    def get_from_stack_default(self, type_text: str, index: int, var: str, default: str) -> str:
        return self.read(type_text, index, var).statement_with_default(index, default)

    def push(self, type_text: str, source: str) -> str:
        info = self.type_mapper.classify(type_text)
        category = info.category
        name = info.name

        if category == TypeCategory.NUMBER:
            return f"duk_push_number(ctx, {source});"
        if category == TypeCategory.BOOL:
            return f"duk_push_boolean(ctx, {source});"
        if category == TypeCategory.STD_STRING:
            return f"duk_push_string(ctx, {source}.c_str());"
        if category == TypeCategory.STRING:
            return f"duk_push_string(ctx, {source}.CString());"
        if category == TypeCategory.VARIANT:
            return f"PushVariant(ctx, {source});"
        if category == TypeCategory.VECTOR:
            if info.element_category in STRING_CATEGORIES:
                return f"PushStringVector(ctx, {source});"
            if info.element_category == TypeCategory.VALUE_OBJECT:
                return (f"PushValueObjectVector(ctx, {source}, {class_id(info.element)}, "
                        f"{finalizer_name(info.element)});")
            return f"PushWeakObjectVector(ctx, {source});"
        if category == TypeCategory.MAP:
            return f"PushWeakObjectMap(ctx, {source});"
        if category in (TypeCategory.SHARED_PTR, TypeCategory.WEAK_OBJECT):
            return f"PushWeakObject(ctx, {source});"
        if category == TypeCategory.VALUE_OBJECT:
            return f"PushValueObjectCopy<{name}>(ctx, {source}, {class_id(name)}, {finalizer_name(name)});"

        raise UnsupportedTypeError(f"Unsupported type {name} for pushing to the stack")

    def arg_check(self, type_text: str, index: int) -> str:
        """Runtime test that argument index can be read as type_text; empty if any value is accepted"""
        info = self.type_mapper.classify(type_text)
        category = info.category

        if category == TypeCategory.NUMBER:
            return f"duk_is_number(ctx, {index})"
        if category == TypeCategory.BOOL:
            return f"duk_is_boolean(ctx, {index})"
        if category in STRING_CATEGORIES:
            return f"duk_is_string(ctx, {index})"
        if category == TypeCategory.VECTOR:
            return f"duk_is_object(ctx, {index})"
        if category == TypeCategory.VALUE_OBJECT:
            return f"GetValueObject<{info.name}>(ctx, {index}, {class_id(info.name)})"
        # Reference-counted objects may legally be null
        if category in (TypeCategory.WEAK_OBJECT, TypeCategory.SHARED_PTR, TypeCategory.VARIANT):
            return ""

        raise UnsupportedTypeError(f"Unsupported type {info.name} for argument checks")

    def get_this(self, class_name: str, var: str = "thisObj") -> str:
        if self.type_mapper.is_refcounted(class_name):
            return f"{class_name}* {var} = GetThisWeakObject<{class_name}>(ctx);"
        return f"{class_name}* {var} = GetThisValueObject<{class_name}>(ctx, {class_id(class_name)});"

    @staticmethod
    def push_constructor_result(class_name: str, source: str) -> str:
        return (f"PushConstructorResult<{class_name}>(ctx, {source}, {class_id(class_name)}, "
                f"{finalizer_name(class_name)});")
