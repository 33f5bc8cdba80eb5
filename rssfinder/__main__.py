from rssfinder.cli import app

app(prog_name="rssfinder")
