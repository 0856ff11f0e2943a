from dataclasses import dataclass


@dataclass(frozen=True)
class CodegenContext:
    """
    Holds options that control how a declaration tree is rendered to text.

    For safety, objects of this type are immutable. To "modify" a context, you can create an altered copy by calling
    its `derive` function, similar to how one would call `replace` for a named tuple.

    Attributes:
        width: The maximum number of columns for a rendered line. The renderer will only break lines at the safe wrap
            points marked in the code (``%W``, ``%Z``, parameter lists etc.), so a line may still overflow if there is
            no such point available.
        indent: The number of columns by which code inside blocks will be indented
        use_tabs: Indent with one tab character per level instead of `indent` spaces. Note that tabs count as a
            single column for the purpose of line wrapping.
        trace: Emit detailed DEBUG log records for every type entered and every name resolved during rendering
    """

    width: int = 100
    indent: int = 2
    use_tabs: bool = False
    trace: bool = False

    def __post_init__(self):
        if self.width < 1:
            raise ValueError(f"Width must be positive, got {self.width}")
        if self.indent < 0:
            raise ValueError(f"Indent must be non-negative, got {self.indent}")

    @property
    def indent_unit(self) -> str:
        """The text written for each level of indentation"""
        return '\t' if self.use_tabs else ' ' * self.indent

    def derive(self, width=None, indent=None, use_tabs=None, trace=None):
        """
        Creates a modified copy of this rendering context (contexts are otherwise immutable).

        Args:
            width: The new width for the context (or None to leave it unchanged)
            indent: The new indent size for the context (or None to leave it unchanged)
            use_tabs: The new 'indent with tabs' flag for the context (or None to leave it unchanged)
            trace: The new 'trace logging' flag for the context (or None to leave it unchanged)

        Returns:
            A context with the modifications performed.
        """
        def coalesce(a, b):
            return a if b is None else b

        return CodegenContext(
            width=coalesce(self.width, width),
            indent=coalesce(self.indent, indent),
            use_tabs=coalesce(self.use_tabs, use_tabs),
            trace=coalesce(self.trace, trace),
        )
