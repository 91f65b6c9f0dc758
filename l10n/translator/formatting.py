"""
printf 风格的位置参数格式化

支持：
- 顺序占位符：%s %d %05.2f ...
- 指定参数位置：%2$s（从 1 开始，不移动顺序指针）
- 字面量百分号：%%

参数少于占位符时抛出 TranslationFormatError；多余的参数被忽略
"""

import re
from typing import Any, Sequence

from l10n.exceptions import TranslationFormatError

_PLACEHOLDER = re.compile(
    r"%(?:(?P<argnum>[1-9][0-9]*)\$)?"
    r"(?P<flags>[-+ 0#]*)"
    r"(?P<width>[0-9]+)?"
    r"(?:\.(?P<precision>[0-9]+))?"
    r"(?P<conversion>[bcdeEfFgGosuxX%])"
)

# PHP 风格转换符 -> Python % 转换符
_CONVERSION_ALIASES = {"u": "d", "F": "f"}


def _format_binary(value: Any, flags: str, width: str) -> str:
    spec = ""
    if "-" in flags:
        spec += "<"
    elif "0" in flags:
        spec += "0"
    return format(int(value), f"{spec}{width}b")


def _format_one(match: "re.Match[str]", value: Any) -> str:
    flags = match.group("flags") or ""
    width = match.group("width") or ""
    precision = match.group("precision")
    conversion = match.group("conversion")

    if conversion == "b":
        return _format_binary(value, flags, width)

    conversion = _CONVERSION_ALIASES.get(conversion, conversion)
    spec = "%" + flags + width
    if precision is not None:
        spec += "." + precision
    spec += conversion
    return spec % (value,)


def format_printf(template: str, args: Sequence[Any]) -> str:
    """按 printf 规则格式化模板

    Args:
        template: 模板文本（如 "%d items"）
        args: 位置参数

    Returns:
        格式化后的文本

    Raises:
        TranslationFormatError: 参数不足或参数与转换符不匹配

    Examples:
        >>> format_printf("%d items", [5])
        '5 items'
        >>> format_printf("%2$s, %1$s", ["world", "hello"])
        'hello, world'
    """
    args = list(args)
    position = 0
    parts = []
    last_end = 0

    for match in _PLACEHOLDER.finditer(template):
        parts.append(template[last_end:match.start()])
        last_end = match.end()

        if match.group("conversion") == "%":
            parts.append("%")
            continue

        argnum = match.group("argnum")
        if argnum is not None:
            index = int(argnum) - 1
        else:
            index = position
            position += 1

        if index >= len(args):
            raise TranslationFormatError(
                f"Placeholder '{match.group(0)}' needs argument {index + 1}, "
                f"but only {len(args)} given",
                template,
            )

        try:
            parts.append(_format_one(match, args[index]))
        except (TypeError, ValueError, OverflowError) as e:
            raise TranslationFormatError(
                f"Argument {index + 1} does not fit placeholder '{match.group(0)}'",
                template,
                cause=e,
            ) from e

    parts.append(template[last_end:])
    return "".join(parts)
