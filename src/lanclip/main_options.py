"""Click option class for the mutually exclusive connection modes."""
import click


def _modes_present(group: tuple[str, ...], opts: dict) -> list[str]:
    """Return the names in group that were given on the command line."""
    return [mode for mode in group if opts.get(mode) is not None]


class ModeOption(click.Option):
    """Option belonging to a group of which exactly one must be given.

    Every option of the group carries the same ``modes`` tuple. The first
    one click processes reports a missing or conflicting mode; the rest
    see the same opts and agree.
    """

    def __init__(self, *args, **kwargs):
        self.modes = tuple(kwargs.pop("modes", ()))
        super().__init__(*args, **kwargs)

    def handle_parse_result(self, ctx, opts, args):
        present = _modes_present(self.modes, opts)
        if not present and not ctx.resilient_parsing:
            flags = ", ".join(f"--{mode}" for mode in self.modes[:-1])
            raise click.UsageError(
                f"One of {flags} or --{self.modes[-1]} must be specified", ctx=ctx
            )
        if len(present) > 1:
            flags = " and ".join(f"--{mode}" for mode in present)
            raise click.UsageError(f"Options {flags} are mutually exclusive", ctx=ctx)
        return super().handle_parse_result(ctx, opts, args)
