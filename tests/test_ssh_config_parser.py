from sshmanager.ssh_config_utils import HostEntry, parse_ssh_config


def test_defaults_fill_user_and_port(home):
    hosts = parse_ssh_config("Host a\nHostName h\n", home)
    assert hosts == [HostEntry(name="a", hostname="h", user="root", port=22, identity_file=None)]


def test_full_stanza(home):
    text = '\n'.join([
        '# my servers',
        'Host prod',
        '    HostName prod.example.com',
        '    User deploy',
        '    Port 2222',
        '    IdentityFile ~/.ssh/id_rsa',
    ])
    [host] = parse_ssh_config(text, home)
    assert host.name == 'prod'
    assert host.id == 'prod'
    assert host.hostname == 'prod.example.com'
    assert host.user == 'deploy'
    assert host.port == 2222
    assert host.identity_file == '/home/tester/.ssh/id_rsa'


def test_keys_are_case_insensitive_and_values_keep_case(home):
    [host] = parse_ssh_config("HOST Box\n  hostname Box.Example.COM\n  USER Admin\n", home)
    assert host.name == 'Box'
    assert host.hostname == 'Box.Example.COM'
    assert host.user == 'Admin'


def test_output_follows_file_order(home):
    text = "Host b\n HostName 2\nHost a\n HostName 1\nHost c\n HostName 3\n"
    assert [h.name for h in parse_ssh_config(text, home)] == ['b', 'a', 'c']


def test_host_without_hostname_is_dropped(home):
    text = "Host empty\nHost next\n  HostName n.example.com\nHost trailing\n"
    assert [h.name for h in parse_ssh_config(text, home)] == ['next']


def test_wildcard_blocks_consume_attributes_without_leaking(home):
    text = '\n'.join([
        'Host *',
        '    User everyone',
        '    HostName wild',
        'Host web?',
        '    HostName web.example.com',
        'Host real',
        '    HostName real.example.com',
    ])
    hosts = parse_ssh_config(text, home)
    assert [h.name for h in hosts] == ['real']
    assert hosts[0].user == 'root'
    assert all('*' not in h.name and '?' not in h.name for h in hosts)


def test_invalid_port_defaults_to_22(home):
    [host] = parse_ssh_config("Host a\n HostName h\n Port ssh\n", home)
    assert host.port == 22


def test_malformed_and_unknown_lines_are_ignored(home):
    text = '\n'.join([
        'Host a',
        '    HostName',
        '    ForwardAgent yes',
        '    HostName h',
        'garbage',
        '',
        '   # indented comment',
    ])
    [host] = parse_ssh_config(text, home)
    assert host.hostname == 'h'


def test_attribute_lines_before_any_host_are_ignored(home):
    text = "User nobody\nPort 99\nHost a\n HostName h\n"
    [host] = parse_ssh_config(text, home)
    assert (host.user, host.port) == ('root', 22)


def test_multi_token_values_are_space_joined(home):
    [host] = parse_ssh_config("Host a\n HostName h\n IdentityFile /keys/my   key\n", home)
    assert host.identity_file == '/keys/my key'


def test_identity_file_outside_home_is_untouched(home):
    [host] = parse_ssh_config("Host a\n HostName h\n IdentityFile /etc/ssh/key\n", home)
    assert host.identity_file == '/etc/ssh/key'


def test_windows_line_endings(home):
    [host] = parse_ssh_config("Host a\r\n  HostName h\r\n  Port 2200\r\n", home)
    assert (host.name, host.hostname, host.port) == ('a', 'h', 2200)


def test_empty_input():
    assert parse_ssh_config("") == []
