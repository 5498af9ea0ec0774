"""Tests pour ExecOptions et normalize_args."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from execr.commands.options import (
    DEFAULT_MAX_BUFFER,
    ExecOptions,
    get_default_options,
    normalize_args,
    set_default_options,
)
from execr.errors import InvalidOptionsError


# --- Tests ExecOptions ---


class TestExecOptions:
    """Tests pour le modèle ExecOptions."""

    def test_valeurs_par_defaut(self):
        """Vérifie les valeurs par défaut des options."""
        options = ExecOptions()
        assert options.fail_on_error is True
        assert options.memoize is False
        assert options.max_buffer == DEFAULT_MAX_BUFFER
        assert options.max_buffer == 10 * 1024 * 1024
        assert options.cwd is None
        assert options.env is None
        assert options.kill_signal == "SIGTERM"

    def test_alias_camel_case(self):
        """Vérifie que les clés camelCase sont acceptées."""
        options = ExecOptions.merge(
            {"failOnError": False, "maxBuffer": 1024, "killSignal": "KILL"}
        )
        assert options.fail_on_error is False
        assert options.max_buffer == 1024
        assert options.kill_signal == "SIGKILL"

    def test_kill_signal_numerique(self):
        """Vérifie la conversion d'un numéro de signal en nom."""
        options = ExecOptions(kill_signal=9)
        assert options.kill_signal == "SIGKILL"
        assert options.kill_signal_number == 9

    def test_kill_signal_inconnu_leve_erreur(self):
        """Vérifie qu'un signal inconnu est refusé."""
        with pytest.raises(InvalidOptionsError):
            ExecOptions.merge({"kill_signal": "SIGNOPE"})

    def test_option_inconnue_leve_erreur(self):
        """Vérifie qu'une clé inconnue est refusée."""
        with pytest.raises(InvalidOptionsError) as exc_info:
            ExecOptions.merge({"fail_on_eror": False})
        assert "fail_on_eror" in str(exc_info.value)

    def test_max_buffer_negatif_leve_erreur(self):
        """Vérifie que max_buffer doit être strictement positif."""
        with pytest.raises(InvalidOptionsError):
            ExecOptions.merge({"max_buffer": 0})

    def test_cwd_converti_en_path(self):
        """Vérifie que cwd est converti en Path."""
        options = ExecOptions.merge({"cwd": "/tmp"})
        assert options.cwd == Path("/tmp")

    def test_frozen(self):
        """Vérifie que les options sont immuables."""
        options = ExecOptions()
        with pytest.raises(ValidationError):
            options.memoize = True

    def test_merge_couches_successives(self):
        """Vérifie que chaque couche surcharge la précédente."""
        options = ExecOptions.merge(
            {"cwd": "/a", "memoize": True},
            {"cwd": "/b"},
            None,
        )
        assert options.cwd == Path("/b")
        assert options.memoize is True

    def test_merge_ignore_les_defauts_non_renseignes(self):
        """Un ExecOptions n'écrase que ses champs explicites."""
        lower = ExecOptions(fail_on_error=False)
        upper = ExecOptions(cwd="/tmp")
        options = ExecOptions.merge(lower, upper)
        assert options.fail_on_error is False
        assert options.cwd == Path("/tmp")

    def test_merge_couche_invalide(self):
        """Vérifie qu'une couche qui n'est pas un mapping est refusée."""
        with pytest.raises(InvalidOptionsError):
            ExecOptions.merge(["pas", "des", "options"])


# --- Tests normalize_args ---


class TestNormalizeArgs:
    """Tests pour la normalisation des formes d'appel."""

    def test_liste_et_options(self):
        """Liste d'arguments suivie d'options."""
        args, options = normalize_args(["status"], {"cwd": "/repo"})
        assert args == ["status"]
        assert options.cwd == Path("/repo")
        assert options.fail_on_error is True

    def test_options_en_premier(self):
        """Un dict en premier est traité comme les options."""
        args, options = normalize_args({"fail_on_error": False})
        assert args == []
        assert options.fail_on_error is False

    def test_execoptions_en_premier(self):
        """Un ExecOptions en premier est traité comme les options."""
        args, options = normalize_args(ExecOptions(memoize=True))
        assert args == []
        assert options.memoize is True

    def test_options_en_premier_ignore_le_second(self):
        """Le second paramètre est ignoré si le premier est options."""
        args, options = normalize_args(
            {"memoize": True}, {"memoize": False, "cwd": "/x"}
        )
        assert args == []
        assert options.memoize is True
        assert options.cwd is None

    def test_aucun_argument(self):
        """Sans paramètre : aucun argument, options par défaut."""
        args, options = normalize_args()
        assert args == []
        assert options.model_dump() == ExecOptions().model_dump()

    def test_filtre_les_valeurs_vides(self):
        """None, False et chaînes vides sont retirés."""
        args, _ = normalize_args(["a", None, "", False, "b"])
        assert args == ["a", "b"]

    def test_conserve_zero_et_convertit_en_str(self):
        """0 est conservé et les valeurs converties en str."""
        args, _ = normalize_args(["-n", 0, Path("/tmp/x")])
        assert args == ["-n", "0", "/tmp/x"]

    def test_tuple_accepte(self):
        """Un tuple est accepté comme liste d'arguments."""
        args, _ = normalize_args(("log", "-1"))
        assert args == ["log", "-1"]

    def test_chaine_seule(self):
        """Une chaîne seule est un argument unique."""
        args, _ = normalize_args("status")
        assert args == ["status"]

    def test_type_invalide_leve_erreur(self):
        """Un entier n'est ni une liste ni des options."""
        with pytest.raises(InvalidOptionsError):
            normalize_args(42)

    def test_priorite_des_defauts(self):
        """Priorité : défauts globaux < défauts wrapper < appel."""
        set_default_options({"cwd": "/global", "timeout": 5})
        args, options = normalize_args(
            ["x"],
            {"timeout": 1},
            defaults={"cwd": "/wrapper", "memoize": True},
        )
        assert options.cwd == Path("/wrapper")
        assert options.timeout == 1
        assert options.memoize is True

    def test_set_default_options_reinitialisation(self):
        """None réinitialise les options globales."""
        set_default_options({"memoize": True})
        assert get_default_options().memoize is True
        set_default_options(None)
        assert get_default_options() is None
