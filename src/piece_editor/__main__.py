from piece_editor.cli import main

raise SystemExit(main())
