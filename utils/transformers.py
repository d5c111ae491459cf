"""
MIT License

Copyright (c) 2019-Present Jake Sichley

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
SOFTWARE.
"""

from typing import Callable, Optional

from discord import app_commands, Interaction


# noinspection PyAbstractClass
class StringTransformer(app_commands.Transformer):
    """
    Mutates a string option and then checks it against a constraint.
    """

    def __init__(
            self,
            *,
            mutator: Optional[Callable[[str], str]] = None,
            constraint: Optional[Callable[[str], bool]] = None,
            display_name: str = 'Text'
    ) -> None:
        """
        The constructor for the StringTransformer class.

        Parameters:
            mutator (Optional[Callable[[str], str]]): Applied to the input before the constraint is checked.
            constraint (Optional[Callable[[str], bool]]): Whether the mutated input is acceptable.
            display_name (str): The name to display during errors.
        """

        self.mutator = mutator
        self.constraint = constraint
        self.display_name = display_name

    async def transform(self, interaction: Interaction, value: str, /) -> str:
        """
        Attempts to transform the input to the desired type.

        Parameters:
            interaction (discord.Interaction): The invocation interaction.
            value (str): The input value.

        Returns:
            (str): The transformed string.
        """

        if self.mutator is not None:
            value = self.mutator(value)

        if self.constraint is not None and not self.constraint(value):
            raise app_commands.TransformerError(value, self.type, self)

        return value

    @property
    def _error_display_name(self) -> str:
        """
        The name to display during errors.

        Parameters:
            None.

        Returns:
            (str): The error display name.
        """

        return self.display_name


EmojiOption = StringTransformer(
    mutator=lambda x: x.strip(),
    constraint=lambda x: 1 <= len(x) <= 100,
    display_name='Emoji'
)
RoleNameOption = StringTransformer(
    mutator=lambda x: x.strip(),
    constraint=lambda x: 1 <= len(x) <= 100,
    display_name='Role Name (1-100 characters)'
)
