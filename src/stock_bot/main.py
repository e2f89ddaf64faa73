"""CLI 진입점"""

from datetime import datetime
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from stock_bot.bot import create_bot
from stock_bot.collectors import NaverApiError, NaverFinanceCollector
from stock_bot.config import get_settings
from stock_bot.formatting import format_quote_line, format_value
from stock_bot.logging_config import setup_logging

app = typer.Typer(
    name="stock-bot",
    help="한국 주식 시세 디스코드 봇",
    add_completion=False,
)

console = Console()


def _rate_style(value: float) -> str:
    """등락 색상 (상승 빨강, 하락 파랑)"""
    if value > 0:
        return "red"
    if value < 0:
        return "blue"
    return "white"


@app.command()
def run() -> None:
    """
    디스코드 봇을 실행합니다.

    .env 또는 환경변수의 DISCORD_TOKEN, DISCORD_CHANNEL이 필요합니다.
    장 시간(평일 08~17시 KST) 동안 관심 목록을 갱신하고 알람을 보냅니다.
    """
    settings = get_settings()
    settings.ensure_dirs()
    setup_logging(settings.log_level, settings.log_dir)

    if not settings.has_discord:
        console.print("[red]DISCORD_TOKEN, DISCORD_CHANNEL 설정이 필요합니다.[/red]")
        raise typer.Exit(1)

    bot = create_bot(settings)
    console.print(Panel(f"[bold]stock-bot[/bold] (prefix: {settings.command_prefix})", style="blue"))
    bot.run(settings.discord_token, log_handler=None)


@app.command()
def index(
    name: Annotated[
        str,
        typer.Argument(help="지수 코드 (KOSPI/KOSDAQ/KPI200)"),
    ] = "KOSPI",
) -> None:
    """지수 실시간 시세를 조회합니다."""
    collector = NaverFinanceCollector()
    try:
        data = collector.get_index(name.upper())
    except NaverApiError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    style = _rate_style(data.change_value)
    console.print(Panel(
        f"[{style}]{format_quote_line(data.now_value, data.change_value, data.change_rate, 2)}[/{style}]\n"
        f"[dim]{data.state.label} · 거래량 {format_value(data.trading_volume)}천주 · "
        f"거래대금 {format_value(data.trading_value)}백만[/dim]",
        title=name.upper(),
    ))


@app.command()
def stock(
    code_or_name: Annotated[
        str,
        typer.Argument(help="종목코드 또는 종목명 (예: 005930, 삼성전자)"),
    ],
) -> None:
    """종목 실시간 시세를 조회합니다."""
    collector = NaverFinanceCollector()
    code = collector.resolve_code(code_or_name)
    try:
        data = collector.get_stock(code)
    except NaverApiError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    style = _rate_style(data.signed_change_value)
    line = format_quote_line(data.now_value, data.signed_change_value, data.signed_change_rate, 0)
    console.print(Panel(
        f"[{style}]{line}[/{style}]\n"
        f"[dim]{data.state.label} · 고가 {format_value(data.high_value)} · "
        f"저가 {format_value(data.low_value)} · 거래량 {format_value(data.trading_volume)}[/dim]",
        title=f"{data.name} ({code})",
    ))


@app.command()
def search(
    keyword: Annotated[
        str,
        typer.Argument(help="검색어 (종목명 일부)"),
    ],
) -> None:
    """종목명을 검색합니다."""
    collector = NaverFinanceCollector()
    try:
        results = collector.search(keyword)
    except NaverApiError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not results:
        console.print(f"[yellow]'{keyword}' 검색 결과가 없습니다.[/yellow]")
        return

    table = Table(title=f"'{keyword}' 검색 결과 ({len(results)}개)")
    table.add_column("종목코드", justify="center", width=8)
    table.add_column("종목명")
    for result in results:
        table.add_row(result.code, result.name)
    console.print(table)


@app.command()
def quotes(
    code: Annotated[
        str,
        typer.Argument(help="종목코드 또는 지수 코드"),
    ],
    is_index: Annotated[
        bool,
        typer.Option(
            "--index", "-i",
            help="지수 시간별 시세 조회",
        ),
    ] = False,
    page: Annotated[
        int,
        typer.Option(
            "--page", "-p",
            min=1,
            help="페이지 번호 (1페이지가 최신)",
        ),
    ] = 1,
    at: Annotated[
        Optional[str],
        typer.Option(
            "--at",
            help="기준 시각 (YYYY-MM-DDTHH:MM, 기본값 현재)",
        ),
    ] = None,
) -> None:
    """시간별 체결 시세 한 페이지를 조회합니다."""
    try:
        max_time = datetime.fromisoformat(at) if at else datetime.now()
    except ValueError:
        console.print(f"[red]기준 시각 형식이 잘못되었습니다: {at} (예: 2024-03-04T15:30)[/red]")
        raise typer.Exit(1)

    collector = NaverFinanceCollector()
    try:
        if is_index:
            result = collector.get_index_quotes(code.upper(), max_time, page)
        else:
            result = collector.get_stock_quotes(code, max_time, page)
    except NaverApiError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"{code} 시간별 시세 ({page}페이지{', 마지막' if result.is_last else ''})")
    table.add_column("체결시각", justify="center", width=6)
    table.add_column("체결가", justify="right")
    table.add_column("누적 거래량", justify="right")
    if not is_index:
        table.add_column("변동량", justify="right")

    for quote in result.quotes:
        if is_index:
            table.add_row(quote.time, f"{quote.value:,.2f}", format_value(quote.trading_volume))
        else:
            table.add_row(
                quote.time,
                format_value(quote.value),
                format_value(quote.trading_volume),
                format_value(quote.trading_vol_move),
            )
    console.print(table)


if __name__ == "__main__":
    app()
