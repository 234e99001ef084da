"""goqueue 命令行入口

使用方式：
    python -m goqueue cli            # 启动终端排队看板
    python -m goqueue api            # 启动 FastAPI 服务
"""
import click


@click.group()
def main():
    """Global Student Center 排队看板"""
    pass


@main.command("cli")
@click.option(
    "--config",
    default=None,
    help="配置文件路径（默认: config.yaml）",
)
def interactive_cli(config: str):
    """启动终端排队看板"""
    from goqueue.cli.main import main as cli_main
    cli_main(config)


@main.command("api")
@click.option(
    "--host",
    default=None,
    help="服务监听地址（默认读取配置）",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="服务监听端口（默认读取配置）",
)
def serve(host: str, port: int):
    """启动 FastAPI 服务"""
    import uvicorn
    from goqueue.api.main import app
    from goqueue.utils.config import load_config

    web = load_config().web
    host = host or web.host
    port = port or web.port

    click.echo(f"正在启动服务: http://{host}:{port}")
    click.echo(f"API 文档: http://{host}:{port}/docs")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
