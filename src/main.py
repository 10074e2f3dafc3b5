import click
from src.modules.flow.commands import create_flow_commands
from src.modules.request.commands import create_request_commands
from src.modules.logging import create_logger, BaseLogger


class StressflowContext:
    """Context object to store CLI state."""
    def __init__(self):
        self.logger: BaseLogger | None = None

pass_context = click.make_pass_decorator(StressflowContext, ensure=True)

@click.group()
@click.option('--output', '-o',
              type=click.Choice(['colorful', 'plain', 'json']),
              default='colorful',
              help='Output format (colorful for CLI, plain for CI/file, json for machine parsing)',
              envvar='STRESSFLOW_OUTPUT')
@click.option('--log-level', '-l',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
              default='INFO',
              help='Set the logging level',
              envvar='STRESSFLOW_LOG_LEVEL')
@pass_context
def cli(ctx, output, log_level):
    """Stressflow CLI Tool: HTTP load testing with multi-step flows."""
    ctx.logger = create_logger(output, log_level)

# Add commands
cli.add_command(create_request_commands())
cli.add_command(create_flow_commands())

def main():
    cli()

if __name__ == '__main__':
    main()
