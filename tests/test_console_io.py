import builtins

from lbasic.std.io import ConsoleIO


def test_write_echoes_and_records(capsys):
    io = ConsoleIO()
    io.write('a\n')
    io.write('b\n')
    assert capsys.readouterr().out == 'a\nb\n'
    assert io.text == 'a\nb\n'
    io.reset()
    assert io.transcript == []


def test_quiet_output(capsys):
    io = ConsoleIO(echo=False)
    io.write('hidden\n')
    assert capsys.readouterr().out == ''
    assert io.text == 'hidden\n'


def test_scripted_input(capsys):
    io = ConsoleIO(inputs=['first', 'second'])
    assert io.request_input('? ') == 'first'
    assert io.request_input('') == 'second'
    assert io.request_input('') == ''
    assert capsys.readouterr().out == '? '


def test_console_input(monkeypatch):
    prompts = []

    def fake_input(prompt=''):
        prompts.append(prompt)
        return 'typed'
    monkeypatch.setattr(builtins, 'input', fake_input)
    assert ConsoleIO().request_input('name? ') == 'typed'
    assert prompts == ['name? ']


def test_clock_and_delay():
    slept = []
    io = ConsoleIO(clock=lambda: 1.25, sleep=slept.append)
    assert io.now_millis() == 1250
    io.delay(0)
    io.delay(-1)
    io.delay(0.5)
    assert slept == [0.5]


def test_load_module(tmp_path):
    (tmp_path / 'mod.bas').write_text('10 PRINT 1\n', encoding='utf-8')
    io = ConsoleIO(base_dir=str(tmp_path))
    assert io.load_module('mod.bas') == '10 PRINT 1\n'
    assert io.load_module(str(tmp_path / 'mod.bas')) == '10 PRINT 1\n'
    assert io.load_module('missing.bas') is None


def test_export(capsys):
    io = ConsoleIO()
    io.export('game@SCORE', 4.5)
    assert capsys.readouterr().out == 'exp:game@SCORE:4.5\n'
