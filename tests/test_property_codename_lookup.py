"""Property-based tests for codename resolution.

Every version in the static LTS table resolves to its codename; any other
version identifier fails with UnsupportedOSError, and a provisioning run on
such a host never reaches a mutating step.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from conftest import FakeSystemOperations
from docker_installer.config_manager import InstallerConfig
from docker_installer.errors import UnsupportedOSError
from docker_installer.os_release import LTS_CODENAMES, lookup_codename
from docker_installer.provisioner import Provisioner

unknown_version = st.one_of(
    st.builds(
        lambda major, minor: f"{major}.{minor:02d}",
        major=st.integers(min_value=0, max_value=99),
        minor=st.integers(min_value=0, max_value=12),
    ),
    st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789.-_ ", max_size=12),
).filter(lambda v: v.strip() not in LTS_CODENAMES)


@given(version_id=st.sampled_from(sorted(LTS_CODENAMES)))
def test_known_versions_resolve_property(version_id):
    assert lookup_codename(version_id) == LTS_CODENAMES[version_id]


@given(version_id=unknown_version)
def test_unknown_versions_rejected_property(version_id):
    with pytest.raises(UnsupportedOSError):
        lookup_codename(version_id)


@given(version_id=unknown_version)
def test_unknown_version_blocks_mutation_property(version_id):
    system = FakeSystemOperations(
        files={"/etc/os-release": f'ID=ubuntu\nVERSION_ID="{version_id}"\n'}
    )
    provisioner = Provisioner(InstallerConfig(), system, sleep=lambda _: None)

    with pytest.raises(UnsupportedOSError):
        provisioner.run()

    assert system.mutations == []
