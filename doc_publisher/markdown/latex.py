"""
LaTeX處理
LaTeX Handling

- 提取 \\newcommand 宏定義到文檔開頭的 $$...$$ 頭部
- LaTeX命令名不能包含數字，\\T1 改寫為 \\Tone，並登記全文替換
- 行內LaTeX檢測：反斜槓開始的命令自動包裹為 $...$
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..utils.error_handling import LatexDecodeError

# \newcommand{<name>}{<value>}，整行匹配
NEWCOMMAND_PATTERN = re.compile(r"\\newcommand\{(?P<name>.+)\}\{(?P<value>.*)\}")

_DIGIT_WORDS = {
    "0": "zero",
    "1": "one",
    "2": "two",
    "3": "three",
    "4": "four",
    "5": "five",
    "6": "six",
    "7": "seven",
    "8": "eight",
    "9": "nine",
}


def fix_latex_symbol(name: str) -> str:
    """把命令名中的每個數字替換為英文單詞：\\T1 -> \\Tone"""
    return "".join(_DIGIT_WORDS.get(ch, ch) for ch in name)


@dataclass
class MacroDefinition:
    name: str
    value: str

    def to_latex(self) -> str:
        return f"\\newcommand{{{self.name}}}{{{self.value}}}"


def parse_newcommand(line: str) -> Optional[MacroDefinition]:
    """整行是宏定義時返回定義，否則返回None"""
    match = NEWCOMMAND_PATTERN.fullmatch(line.rstrip())
    if match is None:
        return None
    return MacroDefinition(name=match.group("name"), value=match.group("value"))


@dataclass
class LatexMacros:
    """一次渲染中收集的宏定義和命令名替換表"""
    definitions: List[MacroDefinition] = field(default_factory=list)
    substitutions: Dict[str, str] = field(default_factory=dict)

    def extract(self, line: str) -> bool:
        """
        如果該行是宏定義則收入頭部

        Args:
            line: 單行文本

        Returns:
            bool: 該行是否被提取（提取的行不再正常渲染）
        """
        definition = parse_newcommand(line)
        if definition is None:
            return False

        fixed = fix_latex_symbol(definition.name)
        if fixed != definition.name:
            self.substitutions[definition.name] = fixed
        self.definitions.append(MacroDefinition(name=fixed, value=definition.value))
        return True

    def merge(self, other: "LatexMacros") -> None:
        self.definitions.extend(other.definitions)
        self.substitutions.update(other.substitutions)

    def header(self) -> str:
        """$$ 包裹的宏定義頭部；沒有定義時為空字符串"""
        if not self.definitions:
            return ""
        body = "".join(d.to_latex() + "\n" for d in self.definitions)
        return f"$$\n{body}$$\n\n"

    def __bool__(self) -> bool:
        return bool(self.definitions)


def wrap_inline_latex(text: str, offset: int = 0) -> str:
    """
    給行內LaTeX命令加上美元符號

    遇到反斜槓時輸出 $ 並進入LaTeX模式；在LaTeX模式中遇到第一個非字母數字字符時
    輸出 $ 並退出（該字符照常輸出）。行尾仍在LaTeX模式時補上 $。
    例：energy = \\alpha + 3 -> energy = $\\alpha$ + 3

    Args:
        text: 去掉首尾空白後的單行文本
        offset: text在所在行中的起始位置，錯誤位置按行計算

    Raises:
        LatexDecodeError: 文本中含有無法解碼的字符（孤立代理項）
    """
    out = []
    in_latex = False
    for pos, ch in enumerate(text):
        if "\ud800" <= ch <= "\udfff":
            raise LatexDecodeError(
                f"error decoding character at position {offset + pos}", position=offset + pos
            )

        if not in_latex and ch == "\\":
            out.append("$")
            in_latex = True
        elif in_latex and not ch.isalnum():
            out.append("$")
            in_latex = False

        out.append(ch)

    if in_latex:
        out.append("$")

    return "".join(out)
