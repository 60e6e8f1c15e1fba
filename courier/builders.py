"""
argparse front-end for a command registry.

configure() adds one sub-command per registered Command; each option becomes a
flag "-<name>" (plus "--<alias>") and any extra positional arguments are
collected under "_". The parsed namespace carries a "handler" callable that
forwards the command and its argv mapping to the dispatcher:

    parser = argparse.ArgumentParser(prog="courier")
    configure(parser, cli.commands, cli.handle)
    namespace = parser.parse_args()
    await namespace.handler(namespace)
"""
import argparse

# Option type -> add_argument() keywords.
TYPES = {
    "boolean": {"action": "store_true"},
    "count": {"action": "count"},
    "number": {"type": float},
    "array": {"nargs": "*"},
    "string": {"type": str},
}


def add_option(parser, option, /):
    """
    Add one Option to an argparse parser.
    """
    flags = [f"-{option.name}"]
    if option.alias:
        flags.append(f"--{option.alias}")
    keywords = {"dest": option.name, "help": option.description or None}
    keywords.update(TYPES.get(option.type, TYPES["string"]))
    if option.required:
        keywords["required"] = True
    else:
        keywords["default"] = _default(option)
    return parser.add_argument(*flags, **keywords)


def _default(option):
    # "" is the explicit empty default of the pipe form
    if option.type == "count":
        return int(option.default or 0)
    if option.type == "array":
        if option.default in (None, ""):
            return []
        return option.default if isinstance(option.default, list) else [option.default]
    if option.type == "number" and option.default == "":
        return None
    return option.default


def to_argv(command, namespace, /):
    """
    Build the argv mapping handed to handlers from a parsed namespace.

    Every option is available under its short name and under its alias; extra
    positional arguments are listed under "_".
    """
    argv = {"_": list(getattr(namespace, "_", None) or [])}
    for option in command.options.values():
        value = getattr(namespace, option.name, option.default)
        argv[option.name] = value
        if option.alias:
            argv[option.alias] = value
    return argv


def _bind(command, handler):
    def dispatch(namespace):
        return handler(command, to_argv(command, namespace))

    return dispatch


def configure(parser, registry, handler=None, /):
    """
    Add a sub-command to parser for every command of registry.

    Parameters
    - parser: argparse.ArgumentParser
    - registry: Mapping[str, Command]
    - handler: Callable[[Command, dict], Any] | None
      Called by namespace.handler(namespace) with the selected command.

    Returns
    - the sub-parsers action, so callers can add their own sub-commands.
    """
    subparsers = parser.add_subparsers(dest="command", metavar="command")
    for name in sorted(registry):
        command = registry[name]
        subparser = subparsers.add_parser(
            name,
            help=command.description or None,
            description=command.description or None,
            conflict_handler="resolve",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        )
        for key in sorted(command.options):
            add_option(subparser, command.options[key])
        subparser.add_argument("_", nargs="*", metavar="args")
        if handler is not None:
            subparser.set_defaults(handler=_bind(command, handler))
    return subparsers


__all__ = (
    "TYPES",
    "add_option",
    "to_argv",
    "configure",
)
