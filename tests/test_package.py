"""Tests for the Package entity: memoized fetch and derived accessors."""

import asyncio

import pytest
from conftest import FakeSource, make_payload

from crate_pkgbuild.errors import RegistryFetchError
from crate_pkgbuild.schemas import PackageSpec
from crate_pkgbuild.services.package import Package


def make_package(payload, name="foo", binaries=None, **kwargs):
    source = FakeSource({name: payload}, **kwargs)
    spec = PackageSpec(name=name, binaries=binaries or [name])
    return Package(spec, source), source


class TestMemoizedFetch:
    @pytest.mark.asyncio
    async def test_accessors_share_a_single_fetch(self):
        package, source = make_package(make_payload("1.2.0"))

        await package.latest_version()
        await package.latest_version()
        await package.license()
        await package.descriptive_info()

        assert source.calls == ["foo"]

    @pytest.mark.asyncio
    async def test_concurrent_first_calls_join_the_same_fetch(self):
        package, source = make_package(make_payload("1.2.0"), delays={"foo": 0.01})

        first, second = await asyncio.gather(package.load_metadata(), package.load_metadata())

        assert first is second
        assert source.calls == ["foo"]

    @pytest.mark.asyncio
    async def test_failed_fetch_is_not_retried(self):
        error = RegistryFetchError("foo", "HTTP 503 Service Unavailable", status_code=503)
        package, source = make_package(make_payload("1.2.0"), failures={"foo": error})

        with pytest.raises(RegistryFetchError):
            await package.latest_version()
        with pytest.raises(RegistryFetchError):
            await package.license()

        assert source.calls == ["foo"]

    @pytest.mark.asyncio
    async def test_packages_do_not_share_payloads(self):
        source = FakeSource({"foo": make_payload("1.0.0"), "bar": make_payload("2.0.0")})
        foo = Package(PackageSpec(name="foo", binaries=["foo"]), source)
        bar = Package(PackageSpec(name="bar", binaries=["bar"]), source)

        assert await foo.latest_version() == "1.0.0"
        assert await bar.latest_version() == "2.0.0"
        assert source.calls == ["foo", "bar"]


class TestDerivedAccessors:
    @pytest.mark.asyncio
    async def test_latest_version_indexes_version_history(self):
        payload = make_payload(
            "1.2.0",
            [
                {"num": "2.0.0-beta.1", "license": "MIT"},
                {"num": "1.2.0", "license": "MIT OR Apache-2.0"},
                {"num": "1.1.0", "license": "MIT"},
            ],
        )
        package, _ = make_package(payload)

        assert await package.latest_version() == "1.2.0"
        assert await package.license() == ["MIT", "Apache-2.0"]

    @pytest.mark.asyncio
    async def test_stable_version_missing_from_history(self):
        payload = make_payload("3.0.0", [{"num": "2.9.0", "license": "MIT"}])
        package, _ = make_package(payload)

        assert await package.latest_version() == "3.0.0"
        assert await package.license() == []

    @pytest.mark.asyncio
    async def test_version_without_license(self):
        payload = make_payload("1.0.0", [{"num": "1.0.0", "license": None}])
        package, _ = make_package(payload)

        assert await package.license() == []

    @pytest.mark.asyncio
    async def test_descriptive_info_prefers_homepage(self):
        payload = make_payload(
            "1.0.0",
            description="A thing",
            homepage="https://foo.example",
            repository="https://git.example/foo",
            documentation="https://docs.rs/foo",
        )
        package, _ = make_package(payload)

        info = await package.descriptive_info()

        assert info.description == "A thing"
        assert info.url == "https://foo.example"
        assert info.version == "1.0.0"
        assert info.license == ["MIT"]

    @pytest.mark.asyncio
    async def test_url_falls_back_to_repository_then_documentation(self):
        repo_only, _ = make_package(make_payload("1.0.0", homepage="", repository="https://git.example/foo"))
        docs_only, _ = make_package(make_payload("1.0.0", documentation="https://docs.rs/foo"))
        nothing, _ = make_package(make_payload("1.0.0"))

        assert (await repo_only.descriptive_info()).url == "https://git.example/foo"
        assert (await docs_only.descriptive_info()).url == "https://docs.rs/foo"
        assert (await nothing.descriptive_info()).url == ""
        assert (await nothing.descriptive_info()).description == ""

    @pytest.mark.asyncio
    async def test_extra_licenses_reach_normalizer(self):
        payload = make_payload("1.0.0", [{"num": "1.0.0", "license": "LicenseRef-Acme"}])
        source = FakeSource({"foo": payload})
        package = Package(PackageSpec(name="foo", binaries=["foo"]), source, extra_licenses=["LicenseRef-Acme"])

        assert await package.license() == ["LicenseRef-Acme"]

    @pytest.mark.asyncio
    async def test_resolve_builds_full_descriptor(self):
        payload = make_payload("0.9.0", [{"num": "0.9.0", "license": "MIT/Apache-2.0"}], description="Bar tools")
        package, source = make_package(payload, name="bar", binaries=["bar1", "bar2"])

        descriptor = await package.resolve()

        assert descriptor.name == "bar"
        assert descriptor.binaries == ["bar1", "bar2"]
        assert descriptor.version == "0.9.0"
        assert descriptor.license_tokens == ["MIT", "Apache-2.0"]
        assert descriptor.description == "Bar tools"
        assert source.calls == ["bar"]
