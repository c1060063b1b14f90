import discord
from discord.ext import commands

from loguru import logger

import os
import sys
import traceback
from dotenv import load_dotenv

version = "v1.0"

# ─────────────────────────────────────────────────────────
#  初始化 Bot
# ─────────────────────────────────────────────────────────
# 預設 Intents 已包含 voice_states（語音頻道狀態），斜線指令不需要 message_content
intents = discord.Intents.default()

bot = commands.Bot(
    command_prefix=commands.when_mentioned,
    intents=intents
)

# ─────────────────────────────────────────────────────────
#  機器人啟動事件
# ─────────────────────────────────────────────────────────

@bot.event
async def setup_hook():
    await load_all_extensions()

    logger.info("[初始化] 同步斜線指令")
    slash_command = await bot.tree.sync()
    logger.info(f"[初始化] 已同步 {len(slash_command)} 個斜線指令")


@bot.event
async def on_ready():
    app_info = await bot.application_info()
    bot.owner_id = app_info.owner.id

    activity = discord.Activity(type=discord.ActivityType.listening, name="Subsonic")
    await bot.change_presence(activity=activity)

    logger.info(f"[初始化] {bot.user} | Ready! ({version})")


async def load_all_extensions():
    """自動載入 /cogs 資料夾中的所有 .py 模組"""
    cogs_dir = os.path.join(os.path.dirname(__file__), 'cogs')
    for filename in sorted(os.listdir(cogs_dir)):
        if filename.endswith('.py') and not filename.startswith('_'):
            try:
                logger.info(f"[初始化] 載入 Extension: {filename[:-3]}")
                await bot.load_extension(f'cogs.{filename[:-3]}')
            except commands.ExtensionError as exc:
                logger.error(f"[初始化] 載入 Extension 失敗: {exc}\n{traceback.format_exc()}")
    logger.info("[初始化] Extension 載入完畢")

# ─────────────────────────────────────────────────────────
#  錯誤處理：前綴指令錯誤記錄並回報給擁有者
# ─────────────────────────────────────────────────────────

@bot.event
async def on_command_error(ctx, error):
    if ctx.channel.type == discord.ChannelType.private:
        logger.error(f"{ctx.author.name}({ctx.author.id}):{error}")
    else:
        logger.error(f"{ctx.guild.name}/{ctx.channel.name}/{ctx.author.name}({ctx.author.id}):{error}")

    maintainer = bot.get_user(bot.owner_id) if bot.owner_id else None
    if maintainer is None:
        return

    embed = discord.Embed(title="前綴指令錯誤", description=str(error))
    embed.set_author(name=ctx.author.name, icon_url=ctx.author.display_avatar.url)
    embed.add_field(name="訊息內容", value=ctx.message.content or "（無）")
    await maintainer.send(embed=embed)

# ─────────────────────────────────────────────────────────
#  Loguru 記錄器設定
# ─────────────────────────────────────────────────────────

def set_logger():
    """設定 Loguru 的輸出行為（終端機 & 檔案）"""
    logger.remove()
    debug_mode = os.getenv('DEBUG', '').lower() in ('true', '1', 'yes')

    # 終端輸出
    logger.add(sys.stdout, level="DEBUG" if debug_mode else "INFO", colorize=True)

    # 檔案輸出（每 7 天輪替，保留 30 天，自動壓縮）
    logger.add(
        "./logs/system.log",
        rotation="7 days",
        retention="30 days",
        encoding="UTF-8",
        compression="zip",
        level="INFO",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"
    )

# ─────────────────────────────────────────────────────────
#  程式入口點
# ─────────────────────────────────────────────────────────

if __name__ == '__main__':
    load_dotenv()
    set_logger()

    TOKEN = os.getenv("DISCORD_BOT_TOKEN")
    if not TOKEN:
        logger.critical("❌ DISCORD_BOT_TOKEN 尚未設定，請檢查 .env 或系統環境變數")
        sys.exit(1)

    try:
        bot.run(TOKEN, log_handler=None)
    except discord.LoginFailure as e:
        logger.critical(f"❗ 無法啟動 Discord Bot：{e}")
        sys.exit(1)
