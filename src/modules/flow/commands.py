import click
from typing import Optional, TextIO, Tuple
from .command.run import RunCommand


def create_flow_commands() -> click.Command:
    """Create the flow command."""

    @click.group(name='flow')
    @click.pass_context
    def flow(ctx):
        """Run flow-based load tests."""
        pass

    @flow.command(name='run')
    @click.argument('flow_file', type=click.File('r'), required=False)
    @click.option('--number', '-n', type=int, help='Number of flows to run (overrides the file)')
    @click.option('--concurrent', '-c', type=int, help='Number of concurrent users (overrides the file)')
    @click.option('--success-threshold', type=float, help='Exit with status 2 if the success rate (%) is below this value')
    @click.option('--verbose', '-v', is_flag=True, help='Log assertion failures of every step')
    @click.option('--predicates', '-p', multiple=True, help='Module to import to register custom predicates')
    @click.pass_context
    def run(
        ctx,
        flow_file: Optional[TextIO],
        number: Optional[int],
        concurrent: Optional[int],
        success_threshold: Optional[float],
        verbose: bool,
        predicates: Tuple[str, ...]
    ):
        """Execute a YAML or JSON flow from a file or stdin.
        
        If no file is specified, reads from stdin.
        """
        command = RunCommand(logger=ctx.obj.logger)
        command.run(
            flow_file,
            overrides={
                "number": number,
                "concurrent": concurrent,
                "success_threshold": success_threshold,
                "verbose": True if verbose else None,
            },
            predicate_modules=predicates
        )

    return flow
