from motor.motor_asyncio import AsyncIOMotorClient
from config import settings


client = AsyncIOMotorClient(settings.MONGODB_URL)
db = client[settings.MONGODB_DB_NAME]


admins_collection = db.admins
employees_collection = db.employees
work_logs_collection = db.work_logs
