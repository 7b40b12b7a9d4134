import os
import logging
import discord
from discord.ext import commands
from dotenv import load_dotenv
load_dotenv() #carrega o .env

from db import init_db
from oraculo import build_default_oraculo

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("oraculo.bot")


# --------- bot setup ---------
intents = discord.Intents.default()
intents.message_content = True  # precisa habilitar no Developer Portal também

bot = commands.Bot(command_prefix="!", intents=intents)

oraculo = build_default_oraculo()

HELP_TEXT = (
    "🔮 **Oráculo Financeiro**\n"
    "Me conte seus gastos do jeito que falaria com um amigo:\n"
    "• `gastei 45 no mercado e 30 de uber ontem`\n"
    "• `paguei aluguel dia 5 de março, lanche 20, água 30`\n\n"
    "Eu mostro um resumo e você responde **sim** para registrar ou **não** para corrigir.\n\n"
    "📊 **Relatórios**\n"
    "• `relatório` (mês atual)\n"
    "• `relatório de março`\n"
    "• `relatório do mês passado`\n"
)


@bot.event
async def on_ready():
    logger.info("✅ Logado como %s", bot.user)

@bot.event
async def on_message(message: discord.Message):
    # ignora mensagens do próprio bot
    if message.author.bot:
        return

    text = (message.content or "").strip()
    if not text:
        return

    if text.casefold() in ("ajuda", "help"):
        await message.reply(HELP_TEXT)
        return

    async with message.channel.typing():
        result = await oraculo.handle_message(text, str(message.author.id))

    await message.reply(result["reply"])


# --------- run ---------
if __name__ == "__main__":
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        raise RuntimeError("DISCORD_BOT_TOKEN não definido.")

    if os.getenv("DATABASE_URL"):
        logger.info("🗄️ Inicializando banco de dados (init_db)...")
        init_db()
        logger.info("✅ Banco inicializado com sucesso!")

    bot.run(token, log_handler=None)
