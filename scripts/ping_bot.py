#!/usr/bin/env python3
"""Bot de exemplo: comandos, autocomplete, botão e modal.

Uso:
    DISCORD_PUBLIC_KEY=... DISCORD_APPLICATION_ID=... \
        python scripts/ping_bot.py --port 8080

    # Apenas publicar os comandos (requer DISCORD_BOT_TOKEN)
    python scripts/ping_bot.py --sync-only

Padrao: serve POST /interactions e GET /health.
"""

from __future__ import annotations

import argparse
import asyncio

from app.app import create_app, run
from app.bootstrap import (
    create_custom_id_router,
    create_interaction_runtime,
    initialize_app,
    sync_registered_commands,
)
from app.commands import CommandRegistry
from app.constants.discord import ApplicationCommandType, ComponentType, OptionType
from app.domain import Choice, MessagePayload, OptionSchema

COLORS = ("azul", "amarelo", "verde", "vermelho", "roxo")

registry = CommandRegistry()
components = create_custom_id_router()


@registry.command("ping", "Responde pong")
async def ping(ctx) -> None:
    await ctx.send_message("pong")


async def _suggest_colors(ctx) -> None:
    typed = (ctx.focused_value or "").lower()
    await ctx.autocomplete((color, color) for color in COLORS if color.startswith(typed))


@registry.command(
    "cor",
    "Escolhe uma cor",
    options=(
        OptionSchema("nome", OptionType.STRING, "Nome da cor", required=True, autocomplete=True),
    ),
    autocomplete=_suggest_colors,
)
async def color(ctx) -> None:
    await ctx.send_message(f"Cor escolhida: {ctx.args['nome']}", ephemeral=True)


registry.describe_group(("dado",), "Rolagens de dado")


@registry.command(
    "rolar",
    "Rola um dado",
    parent=("dado",),
    options=(
        OptionSchema(
            "lados",
            OptionType.INTEGER,
            "Número de lados",
            choices=(Choice("d6", 6), Choice("d20", 20)),
        ),
    ),
)
async def roll(ctx) -> None:
    sides = ctx.args.get("lados") or 6
    # Resposta lenta: o dispatcher confirma sozinho se o prazo interno passar
    await asyncio.sleep(0.1)
    await ctx.send_message(f"Resultado: {sides // 2 + 1} (d{sides})")


@registry.command("contador", "Mensagem com botão")
async def counter(ctx) -> None:
    button = {
        "type": ComponentType.BUTTON,
        "style": 1,
        "label": "+1",
        "custom_id": components.build_custom_id("contador", "0"),
    }
    await ctx.send_message(
        MessagePayload(
            content="Contagem: 0",
            components=({"type": ComponentType.ACTION_ROW, "components": [button]},),
        )
    )


@components.route("contador")
async def increment(ctx) -> None:
    count = int(ctx.remainder or "0") + 1
    button = {
        "type": ComponentType.BUTTON,
        "style": 1,
        "label": "+1",
        "custom_id": components.build_custom_id("contador", str(count)),
    }
    await ctx.update_message(
        MessagePayload(
            content=f"Contagem: {count}",
            components=({"type": ComponentType.ACTION_ROW, "components": [button]},),
        )
    )


@registry.command("feedback", "Abre um formulário")
async def feedback(ctx) -> None:
    text_input = {
        "type": ComponentType.TEXT_INPUT,
        "custom_id": "texto",
        "style": 2,
        "label": "Comentário",
    }
    await ctx.show_modal(
        components.build_custom_id("feedback"),
        "Feedback",
        [{"type": ComponentType.ACTION_ROW, "components": [text_input]}],
    )


@components.route("feedback")
async def feedback_submitted(ctx) -> None:
    await ctx.defer(ephemeral=True)
    size = len(ctx.fields.get("texto", ""))
    await ctx.send_followup(f"Recebido: {size} caracteres", ephemeral=True)


@registry.command("perfil", "", command_type=ApplicationCommandType.USER)
async def profile(ctx) -> None:
    target = ctx.interaction.command.target
    await ctx.send_message(f"Usuário alvo: {target.id if target else '?'}", ephemeral=True)


app = create_app(registry, components=components)


async def _sync_only() -> None:
    from config.settings import get_discord_settings

    settings = get_discord_settings()
    runtime = create_interaction_runtime(registry, components=components, settings=settings)
    try:
        result = await sync_registered_commands(registry, runtime.http_client, settings.guild_id)
        print(f"{len(result)} comandos publicados")
    finally:
        await runtime.http_client.aclose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Bot de exemplo de interações")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--sync-only", action="store_true", help="Publica comandos e sai")
    args = parser.parse_args()

    if args.sync_only:
        initialize_app()
        asyncio.run(_sync_only())
        return
    run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
