import os
from dotenv import load_dotenv

load_dotenv()

user = os.getenv("DB_USER")
password = os.getenv("DB_PASSWORD")
host = os.getenv("DB_HOST")
port = os.getenv("DB_PORT", "5432")
db_name = os.getenv("DB_NAME")

redis_host = os.getenv("REDIS_HOST", "redis")
redis_port = int(os.getenv("REDIS_PORT", "6379"))

game_config_dir = os.getenv("GAME_CONFIG_DIR", "config/game")
starting_money = int(os.getenv("STARTING_MONEY", "10000"))
session_ttl_hours = int(os.getenv("SESSION_TTL_HOURS", "720"))

if __name__ == "__main__":
    print(user, host, port, db_name, redis_host, redis_port, game_config_dir)
