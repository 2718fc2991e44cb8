"""交互确认

确认策略：只有以 n/N 开头的回答视为拒绝，其余回答（包括直接回车）均视为继续；
输入流结束（EOF / Ctrl-D）视为拒绝。
"""

from __future__ import annotations

import click


def is_affirmative(answer: str) -> bool:
    """判断用户回答是否表示继续"""
    return not answer.strip().lower().startswith("n")


class ConsolePrompter:
    """终端确认提示（默认实现）"""

    def confirm(self, message: str) -> bool:
        try:
            answer = click.prompt(
                f"{message} [Y/n]", default="", show_default=False,
                prompt_suffix=" ",
            )
        except click.Abort:
            click.echo()
            return False
        return is_affirmative(answer)
