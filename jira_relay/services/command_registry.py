"""Static command registry: token -> command definition."""

from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from jira_relay.models.command import CommandDefinition, ResponseStrategy, normalize_token

PROBLEM_ISSUE_TYPES = (
    "Problema Eléctrico",
    "Problema Mantenimiento",
    "Problema Jardinería",
    "Problema Infraestructura",
)


def _problem_jql(condition: str) -> str:
    issue_types = ",\n  ".join(f'"{name}"' for name in PROBLEM_ISSUE_TYPES)
    return (
        f"issuetype in (\n  {issue_types}\n)\n"
        f"AND {condition}\n"
        "ORDER BY created DESC"
    )


DEFAULT_COMMANDS = (
    CommandDefinition(
        token="problemashoy",
        title="Problemas de hoy",
        description="Problemas creados hoy",
        jql=_problem_jql("created >= startOfDay()"),
    ),
    CommandDefinition(
        token="problemasabiertos",
        title="Problemas abiertos",
        description="Problemas que siguen sin resolver",
        jql=_problem_jql("statusCategory != Done"),
    ),
    CommandDefinition(
        token="problemassemana",
        title="Problemas de la semana",
        description="Problemas creados esta semana",
        jql=_problem_jql("created >= startOfWeek()"),
    ),
    CommandDefinition(
        token="comandos",
        title="Comandos disponibles",
        description="Muestra esta lista de comandos",
        strategy=ResponseStrategy.HELP,
        aliases=("help",),
    ),
)


class CommandRegistry:
    """Read-only mapping from command token (and aliases) to its definition."""

    def __init__(self, definitions: Iterable[CommandDefinition]):
        self._definitions = tuple(definitions)
        table: dict[str, CommandDefinition] = {}
        for definition in self._definitions:
            for token in definition.tokens:
                if token in table:
                    raise ValueError(f"Duplicate command token: {token}")
                table[token] = definition
        self._table: Mapping[str, CommandDefinition] = MappingProxyType(table)

    def get(self, token: Optional[str]) -> Optional[CommandDefinition]:
        if not token:
            return None
        return self._table.get(normalize_token(token))

    def __contains__(self, token: object) -> bool:
        return isinstance(token, str) and self.get(token) is not None

    def __iter__(self) -> Iterator[CommandDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    @property
    def tokens(self) -> frozenset[str]:
        return frozenset(self._table)

    def help_text(self) -> str:
        """Listing of every command, built from the registry itself."""
        lines = ["*Comandos disponibles:*"]
        for definition in self._definitions:
            line = f"• `#{definition.token}` — {definition.description}"
            if definition.aliases:
                aliases = ", ".join(f"`#{alias}`" for alias in definition.aliases)
                line += f" (también {aliases})"
            lines.append(line)
        lines.append("_Escribe el comando en el canal o úsalo como `/comando`._")
        return "\n".join(lines)


def build_default_registry() -> CommandRegistry:
    return CommandRegistry(DEFAULT_COMMANDS)
