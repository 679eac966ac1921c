"""Typer CLI entrypoint for Subsidy Navigator."""

from __future__ import annotations

import time
from typing import Optional, Sequence

import typer
import yaml
from rich import box
from rich.console import Console
from rich.table import Table

from .config import AppConfig, ConfigRepository
from .engine import SubsidyRecord
from .logging_conf import APP_LOG_NAME, ERROR_LOG_NAME, tail_log
from .pipeline import PipelineResult
from .state import AppState, build_state
from .web.service import SubsidyService

app = typer.Typer(
    help="Subsidy Navigator コマンドラインツール",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(
    name="config",
    help="設定ファイルの管理コマンド",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="ログ閲覧コマンド",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()

app.add_typer(config_app, name="config")
app.add_typer(log_app, name="log")


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _render_result_table(result: PipelineResult) -> Table:
    summary = result.summary()
    table = Table(title="実行結果", box=box.SIMPLE_HEAD)
    table.add_column("新規登録", style="green", justify="right")
    table.add_column("スキップ（重複）", style="yellow", justify="right")
    table.add_column("失敗", style="red", justify="right")
    table.add_row(str(summary["processed"]), str(summary["skipped"]), str(summary["failed"]))
    return table


def _render_subsidies_table(records: Sequence[SubsidyRecord], title: str) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAD)
    table.add_column("名称", style="cyan", overflow="fold")
    table.add_column("締切", style="magenta", no_wrap=True)
    table.add_column("産業タグ", style="yellow", overflow="fold")
    table.add_column("金額", style="green", overflow="fold")
    table.add_column("URL", style="dim", overflow="fold")
    for record in records:
        table.add_row(
            record.name,
            record.deadline.date().isoformat(),
            ", ".join(record.industry_tags),
            record.summary_for_client.amount,
            record.source_url,
        )
    return table


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="デバッグログを有効にする"),
) -> None:
    if ctx.invoked_subcommand in ("config", "log"):
        return
    ctx.obj = build_state(verbose)


@app.command("run", help="補助金情報の取得・AI要約フローをフォアグラウンドで実行します。")
def run(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    console.print("AIフローを実行しています…", style="cyan")
    try:
        result = state.pipeline.run()
    finally:
        state.close()
    console.print(_render_result_table(result))
    if result.records:
        console.print(_render_subsidies_table(result.records, "新規登録された補助金"))
    for failure in result.failures:
        console.print(f"- {failure.name} ({failure.stage}): {failure.error}", style="red")
    if result.failures:
        raise typer.Exit(code=1)


@app.command("subsidies", help="登録済みの補助金を締切順に表示します。")
def subsidies(
    ctx: typer.Context,
    limit: int = typer.Option(50, "--limit", help="表示件数の上限。"),
    tag: Optional[str] = typer.Option(None, "--tag", help="産業タグで絞り込み。"),
) -> None:
    state = _get_state(ctx)
    try:
        records = SubsidyService(state.store, state.config.store.collection).list_subsidies()
    finally:
        state.close()
    if tag:
        records = [record for record in records if tag in record.industry_tags]
    if not records:
        console.print("現在、利用可能な補助金情報はありません。", style="dim")
        return
    shown = records[:limit]
    console.print(_render_subsidies_table(shown, f"補助金一覧 · 全 {len(records)} 件"))


@app.command("serve", help="HTTP API サーバーを起動します。")
def serve(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", help="待ち受けホスト。"),
    port: Optional[int] = typer.Option(None, "--port", help="待ち受けポート。"),
) -> None:
    import uvicorn

    from .web import create_app

    state = _get_state(ctx)
    if state.start_scheduler():
        console.print("定期実行スケジューラを開始しました。", style="green")
    try:
        uvicorn.run(
            create_app(state),
            host=host or state.config.server.host,
            port=port or state.config.server.port,
        )
    finally:
        state.close()


@app.command("schedule", help="設定されたスケジュールでフローを定期実行します（Ctrl+C で終了）。")
def schedule(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    if not state.start_scheduler():
        console.print("スケジュールが無効です。schedule.enabled を true にしてください。", style="yellow")
        raise typer.Exit(code=1)
    table = Table(title="スケジュール", box=box.SIMPLE_HEAD)
    table.add_column("ジョブ ID", style="cyan", no_wrap=True)
    table.add_column("次回実行", style="green")
    table.add_column("トリガー", style="magenta", overflow="fold")
    for job in state.scheduler.list_jobs():
        table.add_row(str(job["id"]), str(job["next_run_time"]), str(job["trigger"]))
    console.print(table)
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        console.print("スケジューラを停止します。", style="yellow")
    finally:
        state.close()


@config_app.command("show", help="現在の設定を YAML で表示します。")
def config_show() -> None:
    repository = ConfigRepository()
    config = repository.load_app_config()
    console.print(f"# {repository.locator.app_config_path()}", style="dim")
    console.print(
        yaml.safe_dump(config.model_dump(mode="json"), allow_unicode=True, sort_keys=False),
        markup=False,
    )


@config_app.command("init", help="既定値で設定ファイルを作成します。")
def config_init(
    force: bool = typer.Option(False, "--force", help="既存の設定を上書きする。"),
) -> None:
    repository = ConfigRepository()
    path = repository.locator.app_config_path()
    if path.exists() and not force:
        console.print(f"設定ファイルは既に存在します: {path}", style="yellow")
        raise typer.Exit(code=1)
    repository.save_app_config(AppConfig())
    console.print(f"設定ファイルを作成しました: {path}", style="green")


@log_app.command("show", help="ログの末尾を表示します。")
def log_show(
    tail: int = typer.Option(100, "--tail", help="表示する行数。"),
    errors: bool = typer.Option(False, "--errors", help="エラーログを表示する。"),
) -> None:
    logs_dir = ConfigRepository().locator.logs_dir
    path = logs_dir / (ERROR_LOG_NAME if errors else APP_LOG_NAME)
    lines = tail_log(path, tail)
    if not lines:
        console.print("ログはまだありません。", style="dim")
        return
    console.print(f"{path.name} · 最新 {len(lines)} 行", style="cyan")
    console.print("".join(lines), markup=False)


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
