import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

import jsonref
from pydantic import BaseModel

from ...errors import GenerationError
from ..types.models import (
    Project,
    CodeBlock,
    CodeFile,
    Class,
    Function,
    Parameter,
    Variable,
)
from ..utils.naming import (
    snake_case,
    pascal_case,
    clean_identifier,
    clean_enum_member,
    unique_name,
)
from .templates import templates

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "patch", "head", "options")
SCHEMA_REF_PREFIX = "#/components/schemas/"
PRIMITIVE_TYPES = {
    "string": "str",
    "integer": "int",
    "number": "float",
    "boolean": "bool",
}

# Имена, которые нельзя занимать параметрами операций
RESERVED_PARAMETER_NAMES = {"self", "request", "request_body", "models", "config"}


@dataclass
class ServiceInfo:
    """Класс сервиса для одного тега"""

    tag: str
    attribute: str
    endpoints_class: Class
    method_names: Set[str] = field(default_factory=lambda: {"config"})


class ClientGenerator:
    """Генератор API клиента из OpenAPI"""

    def __init__(self, openapi_dict: Dict[str, Any], source_url: str = None):
        self.openapi_dict = openapi_dict
        self.source_url = source_url
        self.project = Project(name="generated")
        self.schemas = self._resolve(
            self._resolve(openapi_dict.get("components") or {}).get("schemas") or {}
        )
        self.model_names: Dict[str, str] = {}  # schema name -> class name
        self.alias_names: Dict[str, str] = {}  # schema name -> alias name
        self.services: Dict[str, ServiceInfo] = {}

    def generate(self) -> Project:
        """Основная генерация"""
        self._register_schemas()
        self._create_base_files()
        self._generate_models()
        self._generate_services()
        self._generate_client()
        self._generate_init()
        return self.project

    # ------------------------------------------------------------------ #
    # Ссылки
    # ------------------------------------------------------------------ #

    def _pointer(self, ref: str) -> Any:
        node = self.openapi_dict
        for part in ref[2:].split("/"):
            part = part.replace("~1", "/").replace("~0", "~")
            node = self._resolve(node)
            try:
                node = node[part]
            except (KeyError, TypeError) as exc:
                raise GenerationError(f"Unresolvable reference {ref}") from exc
        return node

    def _resolve(self, obj: Any) -> Any:
        """Разворачивает ссылку: прокси jsonref или сырой {"$ref": "#/..."}"""
        for _ in range(32):
            if isinstance(obj, jsonref.JsonRef):
                obj = obj.__subject__
            elif (
                isinstance(obj, dict)
                and isinstance(obj.get("$ref"), str)
                and obj["$ref"].startswith("#/")
            ):
                obj = self._pointer(obj["$ref"])
            else:
                return obj
        raise GenerationError("Reference chain is too deep")

    @staticmethod
    def _schema_ref(schema: Any) -> Optional[str]:
        """Имя схемы из components/schemas, если schema на нее ссылается"""
        if isinstance(schema, jsonref.JsonRef):
            ref = schema.__reference__.get("$ref", "")
        elif isinstance(schema, dict):
            ref = schema.get("$ref", "")
        else:
            return None

        if isinstance(ref, str) and ref.startswith(SCHEMA_REF_PREFIX):
            return ref[len(SCHEMA_REF_PREFIX) :].replace("~1", "/").replace("~0", "~")
        return None

    # ------------------------------------------------------------------ #
    # Схемы
    # ------------------------------------------------------------------ #

    def _schema_kind(self, schema: Dict) -> str:
        schema = self._resolve(schema)
        if not isinstance(schema, dict):
            return "alias"

        enum = schema.get("enum")
        if enum and schema.get("type", "string") == "string":
            if all(isinstance(value, str) for value in enum):
                return "enum"

        if schema.get("properties") or schema.get("allOf"):
            return "model"

        return "alias"

    def _register_schemas(self):
        """Регистрация имен всех схем до генерации типов"""
        used: Set[str] = set()

        for schema_name, schema_spec in self.schemas.items():
            class_name = pascal_case(schema_name)
            if not class_name.isidentifier():
                class_name = f"Model{class_name}"
            class_name = unique_name(class_name, used)

            if self._schema_kind(schema_spec) == "alias":
                self.alias_names[schema_name] = class_name
            else:
                self.model_names[schema_name] = class_name

    def _get_type(
        self, schema: Any, prefix: str = "", seen: frozenset = frozenset()
    ) -> Variable:
        """Тип Python для схемы OpenAPI"""
        ref_name = self._schema_ref(schema)
        if ref_name is not None:
            if ref_name in self.model_names:
                return Variable(value=prefix + self.model_names[ref_name])
            if ref_name in seen:
                return Variable(value="Any")
            # Алиасы разворачиваются на месте
            return self._get_type(self._resolve(schema), prefix, seen | {ref_name})

        schema = self._resolve(schema)
        if not isinstance(schema, dict) or not schema:
            return Variable(value="Any")

        nullable = bool(schema.get("nullable"))
        schema_type = schema.get("type")
        if isinstance(schema_type, list):
            nullable = nullable or "null" in schema_type
            non_null = [t for t in schema_type if t != "null"]
            schema_type = non_null[0] if len(non_null) == 1 else None

        var_type = self._get_composite_type(schema, prefix, seen)

        if var_type is not None:
            pass
        elif schema_type == "array":
            var_type = Variable(
                value=self._get_type(schema.get("items") or {}, prefix, seen),
                wrap_name="List",
            )
        elif schema_type in PRIMITIVE_TYPES:
            var_type = Variable(value=PRIMITIVE_TYPES[schema_type])
        elif schema_type == "object" or "properties" in schema:
            additional = self._resolve(schema.get("additionalProperties"))
            value_type = (
                self._get_type(schema["additionalProperties"], prefix, seen)
                if isinstance(additional, dict) and additional
                else Variable(value="Any")
            )
            var_type = Variable(value=["str", value_type], wrap_name="Dict")
        else:
            var_type = Variable(value="Any")

        return var_type.optional() if nullable else var_type

    def _get_composite_type(
        self, schema: Dict, prefix: str, seen: frozenset
    ) -> Optional[Variable]:
        """oneOf / anyOf / allOf"""
        for key in ("oneOf", "anyOf"):
            if schema.get(key):
                variants: List[str] = []
                for sub_schema in schema[key]:
                    sub_type = str(self._get_type(sub_schema, prefix, seen))
                    if sub_type not in variants:
                        variants.append(sub_type)

                if "Any" in variants:
                    return Variable(value="Any")
                if len(variants) == 1:
                    return Variable(value=variants[0])
                return Variable(value=variants, wrap_name="Union")

        all_of = schema.get("allOf")
        if all_of:
            if len(all_of) == 1 and not schema.get("properties"):
                return self._get_type(all_of[0], prefix, seen)
            return Variable(value=["str", "Any"], wrap_name="Dict")

        return None

    def _collect_properties(
        self, schema: Any, depth: int = 0
    ) -> Tuple[Dict[str, Any], Set[str]]:
        """Свойства схемы с учетом allOf"""
        schema = self._resolve(schema)
        if not isinstance(schema, dict):
            return {}, set()

        properties: Dict[str, Any] = {}
        required: Set[str] = set()

        if depth < 10:
            for part in schema.get("allOf") or []:
                part_properties, part_required = self._collect_properties(
                    part, depth + 1
                )
                properties.update(part_properties)
                required |= part_required

        properties.update(self._resolve(schema.get("properties") or {}))
        required |= set(schema.get("required") or [])
        return properties, required

    @staticmethod
    def _field_name(name: str) -> str:
        field_name = clean_identifier(name, "field")
        if hasattr(BaseModel, field_name) or field_name.startswith("model_"):
            field_name = f"{field_name}_"
        return field_name

    @staticmethod
    def _docstring(text: Optional[str]) -> Optional[str]:
        if not text:
            return None
        text = str(text).strip().replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
        if text.endswith('"'):
            text += " "
        return text or None

    # ------------------------------------------------------------------ #
    # Файлы
    # ------------------------------------------------------------------ #

    def _create_base_files(self):
        """Создание базовых файлов проекта"""
        info = self._resolve(self.openapi_dict.get("info") or {})
        servers = self.openapi_dict.get("servers") or []
        base_url = ""
        if servers:
            base_url = str(self._resolve(servers[0]).get("url", ""))

        self.project.add_file("constants.py").add_code_block(
            CodeBlock(
                code=templates.constants.format(
                    base_url=base_url,
                    version=str(info.get("version", "")),
                    title=str(info.get("title", "")),
                    source_url=self.source_url,
                ).rstrip()
            )
        )
        self.project.add_file("core.py").add_code_block(
            CodeBlock(code=templates.core.rstrip())
        )

    def _generate_models(self):
        """Pydantic модели и enum'ы из components/schemas"""
        models_file = self.project.add_file(
            "models.py",
            imports=[
                "from __future__ import annotations",
                "",
                "from enum import Enum",
                "from typing import Any, Dict, List, Optional, Union",
                "",
                "from pydantic import BaseModel, ConfigDict, Field",
            ],
        )

        for schema_name, schema_spec in self.schemas.items():
            if schema_name in self.model_names:
                class_name = self.model_names[schema_name]
                if self._schema_kind(schema_spec) == "enum":
                    self._generate_enum(models_file, class_name, schema_spec)
                else:
                    self._generate_model(models_file, class_name, schema_spec)
            else:
                alias = self.alias_names[schema_name]
                models_file.add_code_block(
                    CodeBlock(
                        code=f"{alias} = {self._get_type(schema_spec, '', frozenset({schema_name}))}",
                        order=10,
                    )
                )

        model_classes = [
            cls.name for cls in models_file.classes.values() if "BaseModel" in cls.inherits
        ]
        if model_classes:
            rebuild_code = "\n".join(f"{name}.model_rebuild()" for name in model_classes)
            models_file.add_code_block(
                CodeBlock(
                    code="# Разрешение forward references\n" + rebuild_code,
                    order=-10,
                )
            )

    def _generate_enum(self, models_file: CodeFile, class_name: str, schema: Any):
        schema = self._resolve(schema)
        enum_class = models_file.add_class(
            class_name,
            inherits=["str", "Enum"],
            docstring=self._docstring(schema.get("description")),
            order=30,
        )

        used: Set[str] = set()
        for value in schema["enum"]:
            enum_class.parameters.append(
                Parameter(
                    name=unique_name(clean_enum_member(value), used),
                    default=repr(value),
                )
            )

    def _generate_model(self, models_file: CodeFile, class_name: str, schema: Any):
        schema = self._resolve(schema)
        model_class = models_file.add_class(
            class_name,
            inherits=["BaseModel"],
            docstring=self._docstring(schema.get("description")),
            order=20,
        )

        if schema.get("additionalProperties") is False:
            model_class.add_code_block("model_config = ConfigDict(populate_by_name=True)")
        else:
            model_class.add_code_block(
                'model_config = ConfigDict(populate_by_name=True, extra="allow")'
            )

        properties, required = self._collect_properties(schema)
        used: Set[str] = set()

        for field_name, field_spec in properties.items():
            python_name = unique_name(self._field_name(field_name), used)
            field_type = self._get_type(field_spec)
            is_required = field_name in required

            if not is_required:
                field_type = field_type.optional()

            if python_name != field_name:
                default = (
                    f"Field(alias={field_name!r})"
                    if is_required
                    else f"Field(default=None, alias={field_name!r})"
                )
            else:
                default = None if is_required else "None"

            model_class.parameters.append(
                Parameter(name=python_name, var_type=field_type, default=default)
            )

    # ------------------------------------------------------------------ #
    # Сервисы
    # ------------------------------------------------------------------ #

    def _generate_services(self):
        """Генерация классов сервисов по тегам"""
        services_file = self.project.add_file(
            "services.py",
            imports=[
                "from typing import Any, Dict, List, Optional, Union",
                "",
                "from . import models",
                "from .core import OpenAPIConfig, request",
            ],
        )

        paths = self._resolve(self.openapi_dict.get("paths") or {})
        for path, path_item in paths.items():
            path_item = self._resolve(path_item)
            shared_parameters = path_item.get("parameters") or []

            for method in HTTP_METHODS:
                if method in path_item:
                    self._generate_operation(
                        services_file,
                        path,
                        method,
                        self._resolve(path_item[method]),
                        shared_parameters,
                    )

    def _ensure_service(self, services_file: CodeFile, operation: Dict) -> ServiceInfo:
        tags = operation.get("tags") or []
        tag = str(tags[0]) if tags else "default"

        if tag not in self.services:
            used_classes = {info.endpoints_class.name for info in self.services.values()}
            used_attributes = {info.attribute for info in self.services.values()}
            used_attributes.add("config")

            class_name = unique_name(f"{pascal_case(tag) or 'Default'}Service", used_classes)
            if not class_name.isidentifier():
                class_name = unique_name(f"Service{class_name}", used_classes)

            endpoints_class = services_file.add_class(
                class_name, docstring=f"Операции {tag}"
            )
            endpoints_class.add_function(
                Function(
                    name="__init__",
                    parameters=[
                        Parameter(name="self"),
                        Parameter(name="config", var_type=Variable(value="OpenAPIConfig")),
                    ],
                    code=CodeBlock(code="self.config = config"),
                )
            )

            self.services[tag] = ServiceInfo(
                tag=tag,
                attribute=unique_name(clean_identifier(tag, "service"), used_attributes),
                endpoints_class=endpoints_class,
            )

        return self.services[tag]

    def _function_name(self, path: str, method: str, operation: Dict) -> str:
        operation_id = operation.get("operationId")
        if operation_id:
            return clean_identifier(str(operation_id), method)

        path_parts = [
            part for part in path.strip("/").split("/") if part and "{" not in part
        ]
        return clean_identifier("_".join([method] + path_parts), method)

    def _merge_parameters(self, shared: List, own: List) -> List[Dict]:
        """Параметры операции перекрывают параметры пути"""
        merged: Dict[Tuple[str, str], Dict] = {}
        for param_spec in list(shared) + list(own):
            param_spec = self._resolve(param_spec)
            if isinstance(param_spec, dict) and param_spec.get("name"):
                merged[(param_spec["name"], param_spec.get("in", ""))] = param_spec
        return list(merged.values())

    def _content_schema(self, content: Any) -> Optional[Any]:
        content = self._resolve(content) or {}
        if not content:
            return None

        media_type = "application/json"
        if media_type not in content:
            json_types = [key for key in content if "json" in key]
            media_type = json_types[0] if json_types else next(iter(content))

        return self._resolve(content[media_type] or {}).get("schema")

    def _response_type(self, responses: Any) -> Optional[Variable]:
        responses = self._resolve(responses) or {}
        for status in sorted(responses, key=str):
            if str(status).startswith("2"):
                response = self._resolve(responses[status]) or {}
                schema = self._content_schema(response.get("content"))
                if schema is not None:
                    return self._get_type(schema, "models.")
        return None

    def _default_literal(self, schema: Any) -> str:
        schema = self._resolve(schema) or {}
        default = schema.get("default") if isinstance(schema, dict) else None
        if isinstance(default, (str, int, float, bool)):
            return repr(default)
        return "None"

    def _generate_operation(
        self,
        services_file: CodeFile,
        path: str,
        method: str,
        operation: Dict,
        shared_parameters: List,
    ):
        """Генерация async метода операции"""
        service = self._ensure_service(services_file, operation)
        func_name = unique_name(
            self._function_name(path, method, operation), service.method_names
        )

        parameters = [Parameter(name="self")]
        used = set(RESERVED_PARAMETER_NAMES)
        groups: Dict[str, List[Tuple[str, str]]] = {"path": [], "query": [], "header": []}
        args_doc: List[str] = []

        for param_spec in self._merge_parameters(
            shared_parameters, operation.get("parameters") or []
        ):
            location = param_spec.get("in")
            if location not in groups:
                continue

            python_name = unique_name(clean_identifier(param_spec["name"]), used)
            schema = param_spec.get("schema") or {}
            var_type = self._get_type(schema, "models.")

            if location == "path" or param_spec.get("required"):
                parameter = Parameter(name=python_name, var_type=var_type)
            else:
                parameter = Parameter(
                    name=python_name,
                    var_type=var_type.optional(),
                    default=self._default_literal(schema),
                )

            parameters.append(parameter)
            groups[location].append((param_spec["name"], python_name))
            description = " ".join(str(param_spec.get("description", "")).split())
            args_doc.append(f"    {python_name}: {description or location + ' parameter'}")

        request_body = self._resolve(operation.get("requestBody"))
        if request_body:
            schema = self._content_schema(request_body.get("content"))
            body_type = (
                self._get_type(schema, "models.")
                if schema is not None
                else Variable(value="Any")
            )
            if request_body.get("required"):
                parameters.append(Parameter(name="request_body", var_type=body_type))
            else:
                parameters.append(
                    Parameter(
                        name="request_body",
                        var_type=body_type.optional(),
                        default="None",
                    )
                )
            args_doc.append("    request_body: request body")

        response_type = self._response_type(operation.get("responses"))

        lines = [
            "return await request(",
            "\tself.config,",
            f"\t{method.upper()!r},",
            f"\t{path!r},",
        ]
        for location, keyword in (
            ("path", "path_params"),
            ("query", "query"),
            ("header", "headers"),
        ):
            if groups[location]:
                items = ", ".join(f"{name!r}: {value}" for name, value in groups[location])
                lines.append(f"\t{keyword}={{{items}}},")
        if request_body:
            lines.append("\tbody=request_body,")
        if response_type is not None and str(response_type) != "Any":
            lines.append(f"\tresponse_type={response_type},")
        lines.append(")")

        docstring = [
            operation.get("summary") or operation.get("operationId") or f"{method.upper()} {path}"
        ]
        if operation.get("description") and operation.get("description") != docstring[0]:
            docstring += ["", str(operation["description"]).strip()]
        if operation.get("deprecated"):
            docstring += ["", "Deprecated."]
        if args_doc:
            docstring += ["", "Args:"] + args_doc

        service.endpoints_class.add_function(
            Function(
                name=func_name,
                parameters=parameters,
                async_def=True,
                response=str(response_type) if response_type is not None else "Any",
                docstring=self._docstring("\n".join(map(str, docstring))),
                code=CodeBlock(code="\n".join(lines)),
            )
        )

    # ------------------------------------------------------------------ #
    # Клиент
    # ------------------------------------------------------------------ #

    def _service_classes(self) -> List[str]:
        return [info.endpoints_class.name for info in self.services.values()]

    def _generate_client(self):
        """Класс Client: конфигурация и по атрибуту на каждый сервис"""
        imports = ["from typing import Optional", "", "from .core import OpenAPIConfig"]
        if self.services:
            imports.append(f"from .services import {', '.join(self._service_classes())}")

        client_file = self.project.add_file("client.py", imports=imports)

        init_code = ["self.config = config if config is not None else OpenAPIConfig()"]
        for info in self.services.values():
            init_code.append(
                f"self.{info.attribute} = {info.endpoints_class.name}(self.config)"
            )

        client_class = client_file.add_class(
            "Client",
            docstring="Клиент API: у каждого экземпляра своя конфигурация",
            order=10,
        )
        client_class.add_function(
            Function(
                name="__init__",
                parameters=[
                    Parameter(name="self"),
                    Parameter(
                        name="config",
                        var_type=Variable(value="OpenAPIConfig").optional(),
                        default="None",
                    ),
                ],
                code=CodeBlock(code="\n".join(init_code)),
            )
        )

        client_file.add_function(
            Function(
                name="create_client",
                parameters=[
                    Parameter(
                        name="config",
                        var_type=Variable(value="OpenAPIConfig").optional(),
                        default="None",
                    )
                ],
                response="Client",
                code=CodeBlock(code="return Client(config)"),
            )
        )

    def _generate_init(self):
        info = self._resolve(self.openapi_dict.get("info") or {})
        header = templates.client_header.format(
            title=self._docstring(info.get("title")) or "API",
            version=self._docstring(str(info.get("version", ""))) or "",
        ).rstrip()

        exports = [
            "ApiError",
            "ApiRequest",
            "ApiResponse",
            "Client",
            "OpenAPIConfig",
            "create_client",
            "models",
            "request",
        ] + self._service_classes()

        imports = [
            header,
            "",
            "from . import models",
            "from .client import Client, create_client",
            "from .core import ApiError, ApiRequest, ApiResponse, OpenAPIConfig, request",
        ]
        if self.services:
            imports.append(f"from .services import {', '.join(self._service_classes())}")

        init_file = self.project.add_file("__init__.py", imports=imports)
        init_file.add_code_block(CodeBlock(code=f"__all__ = {exports!r}"))
