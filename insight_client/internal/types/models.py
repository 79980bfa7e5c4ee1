import textwrap
from typing import Optional, Union

from pydantic import BaseModel, field_validator

INDENT = "    "


def indent(code: str) -> str:
    return textwrap.indent(code, INDENT, lambda line: bool(line.strip()))


class Variable(BaseModel):
    """Выражение типа: List[models.Object], Optional[str], ..."""

    value: list[Union["Variable", str]] = []
    wrap_name: Optional[str] = None

    @field_validator("value", mode="before")
    def value_check(cls, value):
        if not isinstance(value, list):
            return [value]
        return value

    def __str__(self):
        _value = ", ".join(str(_) for _ in self.value)

        if self.wrap_name is None:
            return _value or "Any"

        return f"{self.wrap_name}[{_value}]" if _value else self.wrap_name

    def optional(self) -> "Variable":
        if self.wrap_name == "Optional" or str(self) in ("Any", "None"):
            return self
        return Variable(value=self, wrap_name="Optional")


class Parameter(BaseModel):
    name: str

    var_type: Optional[Variable] = None
    default: Optional[str] = None

    order: int = 0

    @property
    def required(self) -> bool:
        return self.default is None

    def __str__(self):
        return (
            self.name
            + (f": {self.var_type}" if self.var_type else "")
            + (f" = {self.default}" if self.default is not None else "")
        )


class CodeBlock(BaseModel):
    order: int = 0
    code: str = "pass"

    def __str__(self):
        return self.code.replace("\t", INDENT)


class Function(BaseModel):
    name: str
    parameters: list[Parameter] = []
    response: str = "None"

    async_def: bool = False
    decorators: list[str] = []
    docstring: Optional[str] = None

    code: CodeBlock = CodeBlock(code="pass")
    order: int = 0

    def _signature(self) -> str:
        # Обязательные параметры идут первыми, self всегда в начале
        parameters = sorted(
            self.parameters,
            key=lambda p: (p.name != "self", not p.required),
        )

        head = f"{'async ' if self.async_def else ''}def {self.name}("
        tail = f") -> {self.response}:"

        args = ", ".join(map(str, parameters))
        if len(parameters) > 1 and len(head + args + tail) > 88:
            args = "\n" + "".join(f"{INDENT}{p},\n" for p in parameters)

        return head + args + tail

    def __str__(self) -> str:
        lines = list(self.decorators) + [self._signature()]

        body = []
        if self.docstring and "\n" in self.docstring:
            body.append(f'"""\n{self.docstring}\n"""')
        elif self.docstring:
            body.append(f'"""{self.docstring}"""')
        body.append(str(self.code))

        return "\n".join(lines) + "\n" + indent("\n".join(body))


class Class(BaseModel):
    name: str
    inherits: list[str] = []
    docstring: Optional[str] = None

    parameters: list[Parameter] = []
    code_blocks: list[CodeBlock] = []
    functions: dict[str, Function] = {}

    order: int = 0

    def __str__(self) -> str:
        sections = []

        if self.docstring:
            sections.append(f'"""{self.docstring}"""')

        sections.extend(
            str(block) for block in sorted(self.code_blocks, key=lambda x: -x.order)
        )

        if self.parameters:
            sections.append("\n".join(map(str, self.parameters)))

        sections.extend(str(function) for function in self.functions.values())

        header = f"class {self.name}" + (
            f"({', '.join(self.inherits)})" if self.inherits else ""
        )
        return header + ":\n" + indent("\n\n".join(sections) if sections else "pass")

    def add_function(self, function: Union[Function, str], **kwargs) -> Function:
        if isinstance(function, str):
            function = Function(name=function, **kwargs)

        self.functions[function.name] = function
        return function

    def add_code_block(self, code_block: Union[CodeBlock, str], **kwargs) -> "Class":
        if isinstance(code_block, str):
            code_block = CodeBlock(code=code_block, **kwargs)

        self.code_blocks.append(code_block)
        return self


class CodeFile(BaseModel):
    file_name: str

    imports: list[str] = []
    code_blocks: list[CodeBlock] = []
    functions: dict[str, Function] = {}
    classes: dict[str, Class] = {}

    def __str__(self):
        items = sorted(
            self.code_blocks
            + list(self.classes.values())
            + list(self.functions.values()),
            key=lambda x: -x.order,
        )

        parts = []
        if self.imports:
            parts.append("\n".join(self.imports))
        parts.extend(str(item) for item in items)

        return "\n\n\n".join(parts).replace("\t", INDENT) + "\n"

    def add_function(self, function: Union[Function, str], **kwargs) -> Function:
        if isinstance(function, str):
            function = Function(name=function, **kwargs)

        self.functions[function.name] = function
        return function

    def add_class(self, cls: Union[Class, str], **kwargs) -> Class:
        if isinstance(cls, str):
            cls = Class(name=cls, **kwargs)

        self.classes[cls.name] = cls
        return cls

    def add_code_block(
        self, code_block: Union[CodeBlock, str], **kwargs
    ) -> "CodeFile":
        if isinstance(code_block, str):
            code_block = CodeBlock(code=code_block, **kwargs)

        self.code_blocks.append(code_block)
        return self


class Project(BaseModel):
    name: str
    files: list[CodeFile] = []

    def add_file(self, file_name: str, **kwargs) -> CodeFile:
        code_file = CodeFile(file_name=file_name, **kwargs)
        self.files.append(code_file)
        return code_file

    def get_file(self, file_name: str) -> Optional[CodeFile]:
        for code_file in self.files:
            if code_file.file_name == file_name:
                return code_file
        return None
