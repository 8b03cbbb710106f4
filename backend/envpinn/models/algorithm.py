from sqlalchemy import Boolean, Column, Float, Integer, String, Text

from envpinn.database import Base


class Algorithm(Base):
    __tablename__ = "algorithms"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    display_name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(100), nullable=False)
    accuracy = Column(Float, nullable=False)
    speed = Column(String(100), nullable=False)
    physics_constraints_json = Column(Text, nullable=False)
    parameters_json = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
