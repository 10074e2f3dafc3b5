from typing import Optional
import click

from src.modules.request.command.request import RequestCommand

def create_request_commands() -> click.Command:
    """Create the request command."""

    @click.command(name="request")
    @click.argument("url")
    @click.option("--number", "-n", type=int, default=100, help="Total number of requests")
    @click.option("--concurrent", "-c", type=int, default=10, help="Number of concurrent requests")
    @click.option("--method", "-m", type=click.Choice(RequestCommand.SUPPORTED_METHODS, case_sensitive=False), default="GET", help="HTTP method")
    @click.option("--data", "-d", help="JSON data to send with the request")
    @click.option("--headers", "-H", help="Additional headers in JSON format")
    @click.option("--timeout", type=int, default=30, help="Request timeout in seconds")
    @click.option("--no-verify-ssl", is_flag=True, help="Disable SSL verification")
    @click.option("--success-threshold", type=float, help="Exit with status 2 if the success rate (%) is below this value")
    @click.pass_context
    def request(
        ctx,
        url: str,
        number: int,
        concurrent: int,
        method: str,
        data: Optional[str],
        headers: Optional[str],
        timeout: int,
        no_verify_ssl: bool,
        success_threshold: Optional[float]
    ):
        """Load test a single URL with the same request.
        
        Sends NUMBER requests in waves of CONCURRENT and prints a summary.
        """
        command = RequestCommand(logger=ctx.obj.logger)
        command.run({
            "url": url,
            "number": number,
            "concurrent": concurrent,
            "method": method,
            "data": data,
            "headers": headers,
            "success_threshold": success_threshold,
            "transport": {"timeout": timeout, "verify_ssl": not no_verify_ssl},
        })

    return request
