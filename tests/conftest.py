import pytest


class FakeS3Client:
    """Stands in for an aioboto3 S3 client context manager."""

    def __init__(self, objects):
        self.objects = objects

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def put_object(self, **kwargs):
        self.objects.append(kwargs)
        return {"ETag": '"etag"'}


class FakeSession:
    def __init__(self):
        self.objects = []
        self.client_kwargs = []

    def client(self, service_name, **kwargs):
        assert service_name == "s3"
        self.client_kwargs.append(kwargs)
        return FakeS3Client(self.objects)


@pytest.fixture
def s3_session():
    return FakeSession()
