import os
import stat

import pytest

from sshmanager.exceptions import HostValidationError
from sshmanager.host_store import HostConfigStore, validate_host_input
from sshmanager.ssh_config_utils import HostEntry


@pytest.fixture
def store(tmp_path, home):
    return HostConfigStore(str(tmp_path / '.ssh' / 'config'), home=home)


def test_missing_file_loads_as_empty(store):
    result = store.load_hosts()
    assert result.success
    assert result.data == []
    assert result.error is None


def test_default_path_uses_ssh_dir(isolated_dirs):
    store = HostConfigStore()
    assert store.config_path == str(isolated_dirs / '.ssh' / 'config')


def test_save_creates_directory_and_file(store, tmp_path):
    result = store.save_hosts([HostEntry(name='prod', hostname='prod.example.com')])
    assert result.success
    config_path = tmp_path / '.ssh' / 'config'
    assert config_path.read_text().startswith('# SSH Manager - Managed Hosts\n')
    assert stat.S_IMODE(os.stat(config_path).st_mode) == 0o600
    assert stat.S_IMODE(os.stat(tmp_path / '.ssh').st_mode) == 0o700
    assert [p.name for p in (tmp_path / '.ssh').iterdir()] == ['config']


def test_load_after_save(store):
    hosts = [
        HostEntry(name='prod', hostname='prod.example.com', port=2222),
        HostEntry(name='db', hostname='db.internal', user='pg'),
    ]
    store.save_hosts(hosts)
    assert store.load_hosts().data == hosts


def test_save_rereads_manual_edits(store, tmp_path):
    config_path = tmp_path / '.ssh' / 'config'
    store.save_hosts([HostEntry(name='prod', hostname='p')])
    loaded = store.load_hosts().data

    # Someone edits the file between load and save
    config_path.write_text('Host manual\n    HostName m\n\n' + config_path.read_text())

    store.save_hosts(loaded + [HostEntry(name='db', hostname='d')])
    text = config_path.read_text()
    assert text.startswith('Host manual\n    HostName m\n\n# SSH Manager - Managed Hosts\n')
    assert [h.name for h in store.load_hosts().data] == ['manual', 'prod', 'db']


def test_add_host_replaces_same_name(store):
    hosts = [HostEntry(name='a', hostname='old'), HostEntry(name='b', hostname='b')]
    result = store.add_host(hosts, HostEntry(name='a', hostname='new'))
    assert result.success
    assert [(h.name, h.hostname) for h in store.load_hosts().data] == [('a', 'new'), ('b', 'b')]


def test_add_host_appends(store):
    store.add_host([HostEntry(name='a', hostname='a')], HostEntry(name='b', hostname='b'))
    assert [h.name for h in store.load_hosts().data] == ['a', 'b']


def test_remove_last_host_drops_managed_section(store, tmp_path):
    config_path = tmp_path / '.ssh' / 'config'
    config_path.parent.mkdir()
    config_path.write_text('Host keep\n    HostName k\n')
    managed = [HostEntry(name='a', hostname='a')]
    store.save_hosts(managed)

    result = store.remove_host(managed, 'a')
    assert result.success
    assert config_path.read_text() == 'Host keep\n    HostName k\n'


@pytest.mark.skipif(hasattr(os, 'geteuid') and os.geteuid() == 0, reason='root ignores file modes')
def test_unreadable_file_yields_failed_result(store, tmp_path):
    config_path = tmp_path / '.ssh' / 'config'
    config_path.parent.mkdir()
    config_path.write_text('Host a\n HostName h\n')
    config_path.chmod(0)
    try:
        result = store.load_hosts()
    finally:
        config_path.chmod(0o600)
    assert not result.success
    assert result.data == []
    assert 'Permission denied' in result.error


def test_save_failure_is_reported(store, tmp_path):
    # A directory in place of the config file cannot be read or replaced
    (tmp_path / '.ssh' / 'config').mkdir(parents=True)
    result = store.save_hosts([HostEntry(name='a', hostname='h')])
    assert not result
    assert result.error


class TestValidateHostInput:
    def test_valid(self, isolated_dirs):
        entry = validate_host_input(' prod ', 'prod.example.com', 'deploy', '2222', '~/.ssh/id_rsa')
        assert entry == HostEntry(
            name='prod',
            hostname='prod.example.com',
            user='deploy',
            port=2222,
            identity_file=str(isolated_dirs / '.ssh' / 'id_rsa'),
        )

    def test_blank_identity_file_is_none(self):
        assert validate_host_input('a', 'h', 'u', 22, '  ').identity_file is None

    @pytest.mark.parametrize('name,hostname,user', [('', 'h', 'u'), ('a', '', 'u'), ('a', 'h', ' ')])
    def test_required_fields(self, name, hostname, user):
        with pytest.raises(HostValidationError):
            validate_host_input(name, hostname, user, 22)

    @pytest.mark.parametrize('name', ['web*', 'db?', 'two names'])
    def test_name_must_be_literal_alias(self, name):
        with pytest.raises(HostValidationError):
            validate_host_input(name, 'h', 'u', 22)

    @pytest.mark.parametrize('port', ['0', '65536', 'ssh', '', None])
    def test_port_range(self, port):
        with pytest.raises(HostValidationError):
            validate_host_input('a', 'h', 'u', port)


def test_saving_loaded_hosts_adopts_unmanaged_stanzas(store, tmp_path):
    config_path = tmp_path / '.ssh' / 'config'
    config_path.parent.mkdir()
    config_path.write_text('Host keep\n    HostName k\n    Compression yes\n')

    store.save_hosts(store.load_hosts().data)
    assert config_path.read_text() == '\n'.join([
        '    Compression yes',
        '',
        '# SSH Manager - Managed Hosts',
        '# Do not edit this section manually',
        '',
        'Host keep',
        '    HostName k',
        '    User root',
        '',
    ])
