from datetime import datetime

import factory

from db.models import Asset, PATRecord, PATTest


class PATRecordFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Factory for creating PATRecord instances."""

    class Meta:
        model = PATRecord
        sqlalchemy_session_persistence = "commit"

    asset_id = factory.Sequence(lambda n: f"{n + 1:04d}")
    site = "Appleby Tech"
    user = "J Appleby"
    test_date = factory.LazyFunction(lambda: datetime(2024, 3, 5, 10, 0))
    test_type = "AUTO"
    pat_class = "I"
    visual_result = "PASS"
    bond_result = "0.09"
    insulation_result = ">299"
    import_batch_id = 1
    date_inferred = False


class AssetFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Factory for creating Inventory Asset instances."""

    class Meta:
        model = Asset
        sqlalchemy_session_persistence = "commit"

    asset_id = factory.Sequence(lambda n: str(n + 1))
    brand = factory.Faker("random_element", elements=["Makita", "Bosch", "Shure", "Yamaha"])
    model = factory.Sequence(lambda n: f"Model {n}")
    category = factory.Faker("random_element", elements=["Power Tools", "Audio", "Lighting"])


class PATTestFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Factory for creating Inventory PATTest instances."""

    class Meta:
        model = PATTest
        sqlalchemy_session_persistence = "commit"

    asset = factory.SubFactory(AssetFactory)
    date = factory.LazyFunction(lambda: datetime(2024, 3, 5, 8, 0))
    result = "PASS"
    inspector = "J Appleby"
    pat_class = "I"
    visual = "PASS"
